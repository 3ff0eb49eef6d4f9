import textwrap
from pathlib import Path

from structlog.testing import capture_logs

import mackerel_client
from mackerel_client.ctxpair import check, main

SOURCE = textwrap.dedent(
    """
    class Base:
        def find_thing(self):
            pass

        def find_thing_context(self, ctx):
            pass

        def lonely(self):
            pass


    class Client(Base):
        def other_context(self, ctx):
            pass

        def _private(self):
            pass

        @property
        def prop(self):
            return 1

        @staticmethod
        def helper():
            pass

        @classmethod
        def build(cls):
            pass


    class Unrelated:
        def orphan(self):
            pass
    """
)


def write_source(tmp_path: Path) -> Path:
    path = tmp_path / "client.py"
    path.write_text(SOURCE)
    return path


def test_reports_unpaired_methods(tmp_path):
    path = write_source(tmp_path)
    diagnostics = check([tmp_path])

    assert [str(d) for d in diagnostics] == [
        f"{path}:9:5: exported method lonely must have both (lonely and lonely_context)",
        f"{path}:14:5: exported method other must have both (other and other_context)",
    ]


def test_bases_found_across_files(tmp_path):
    (tmp_path / "base.py").write_text("class HostsAPI:\n    def find_host(self):\n        pass\n")
    (tmp_path / "client.py").write_text("class Client(HostsAPI):\n    pass\n")

    diagnostics = check([tmp_path])
    assert [d.message for d in diagnostics] == [
        "exported method find_host must have both (find_host and find_host_context)"
    ]
    assert diagnostics[0].path.endswith("base.py")


def test_package_client_is_fully_paired():
    assert check([Path(mackerel_client.__file__).parent]) == []


def test_main_exit_codes(tmp_path, capsys):
    write_source(tmp_path)
    assert main([str(tmp_path)]) == 1
    out = capsys.readouterr().out
    assert "exported method lonely" in out

    clean = tmp_path / "clean"
    clean.mkdir()
    (clean / "client.py").write_text("class Client:\n    def a(self):\n        pass\n\n    def a_context(self, ctx):\n        pass\n")
    assert main([str(clean)]) == 0


def test_main_logs_summary(tmp_path):
    write_source(tmp_path)

    with capture_logs() as logs:
        main([str(tmp_path)])

    summary = [entry for entry in logs if entry["event"] == "ctxpair_checked"]
    assert summary[0]["tool"] == "mackerel-ctxpair"
    assert summary[0]["diagnostics"] == 2
    assert summary[0]["log_level"] == "debug"
