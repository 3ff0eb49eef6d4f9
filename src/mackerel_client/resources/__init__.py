"""Resource models and the per-family operation mixins composed by Client."""
