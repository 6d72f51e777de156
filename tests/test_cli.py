from Cli import main


def test_cli_prints_estimate(capsys):
    assert main(["--trials", "2000", "--seed", "3"]) == 0
    out = capsys.readouterr().out
    assert "π ≈" in out
    assert "Кидків: 2,000" in out


def test_cli_runs_wager(capsys):
    code = main(["--trials", "5000", "--seed", "3", "--bet", "no", "--stake", "10", "--target", "500"])
    assert code == 0
    out = capsys.readouterr().out
    assert "ВИГРАШ" in out or "ПРОГРАШ" in out


def test_cli_rejects_bad_wager(capsys):
    assert main(["--trials", "100", "--bet", "yes", "--stake", "150"]) == 2
    assert "insufficient_balance" in capsys.readouterr().err


def test_cli_rejects_bad_config(capsys):
    assert main(["--needle-length", "0"]) == 2
    assert "Помилка параметрів" in capsys.readouterr().err
