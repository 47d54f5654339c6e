import sys

import pytest

from spreadgate import cli


def run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["spreadgate", *args])
    cli.main()


def test_mock_passes(monkeypatch, capsys):
    run(monkeypatch, "mock", "-a", "0x07", "-b", "0b110")
    out = capsys.readouterr().out
    assert "Constraints satisfied!" in out
    assert "{c = 6}" in out


def test_mock_fails(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc:
        run(monkeypatch, "mock", "-a", "7", "-b", "6", "-c", "7")
    assert exc.value.code == 1
    out = capsys.readouterr().out
    assert "Constraints not satisfied!" in out
    assert "copy constraint" in out


def test_compile(monkeypatch, capsys, tmp_path):
    gates = tmp_path / "a.gates"
    run(monkeypatch, "compile", "-g", str(gates))
    assert "Number of public entries: 2" in capsys.readouterr().out
    assert gates.stat().st_size > 0


def test_setup_prove_verify(monkeypatch, capsys, tmp_path):
    gates, pk, vk, proof = (str(tmp_path / name) for name in ("a.gates", "a.pk", "a.vk", "a.proof"))
    run(monkeypatch, "compile", "-g", gates)
    run(monkeypatch, "setup", "-g", gates, "-p", pk, "-v", vk)
    run(monkeypatch, "prove", "-a", "7", "-b", "6", "-p", pk, "-P", proof)
    run(monkeypatch, "verify", "-c", "6", "-v", vk, "-P", proof)
    assert "Verification passed!" in capsys.readouterr().out
    with pytest.raises(SystemExit):
        run(monkeypatch, "verify", "-c", "7", "-v", vk, "-P", proof)
    assert "Verification failed!" in capsys.readouterr().out
