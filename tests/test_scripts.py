import runpy
from pathlib import Path

import pytest

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


@pytest.mark.parametrize("argv", [[], ["abc"], ["0"], ["00"], ["1", "2"]])
def test_fetch_customer_rejects_bad_ids(monkeypatch, capsys, argv):
    monkeypatch.setattr("sys.argv", ["fetch_customer.py", *argv])
    with pytest.raises(SystemExit) as exc:
        runpy.run_path(str(SCRIPTS / "fetch_customer.py"), run_name="__main__")
    assert exc.value.code == 1
    assert capsys.readouterr().out.startswith("Usage:")
