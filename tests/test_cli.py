import pytest
import pandas as pd
from resample_eval.cli import main


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_simulate_writes_csv(tmp_path, capsys):
    out = tmp_path / "growth.csv"
    assert main(["simulate", "growth", "--rows", "40", "--output", str(out)]) == 0
    df = pd.read_csv(out)
    assert len(df) == 40
    assert {"weight", "armc", "sex"} <= set(df.columns)
    assert "Wrote 40 rows" in capsys.readouterr().out


def test_bootstrap_synthetic(tmp_path, capsys):
    out = tmp_path / "coefs.csv"
    code = main([
        "bootstrap", "--synthetic", "linear", "--rows", "80",
        "--repetitions", "30", "--output", str(out),
    ])
    assert code == 0
    assert "Bootstrap: linear" in capsys.readouterr().out
    frame = pd.read_csv(out)
    assert list(frame["term"]) == ["(Intercept)", "x"]


def test_bootstrap_from_file(tmp_path, capsys):
    data = tmp_path / "growth.csv"
    main(["simulate", "growth", "--rows", "80", "--output", str(data)])
    code = main([
        "bootstrap", "--data", str(data), "--response", "ARMC", "--predictors", "weight", "sex",
        "--categorical", "sex", "--family", "piecewise", "--knots", "7", "--repetitions", "20",
    ])
    assert code == 0
    out = capsys.readouterr().out
    assert "weight_cp7" in out
    assert "sex_male" in out


def test_cv_synthetic(tmp_path, capsys):
    out = tmp_path / "rmse.csv"
    code = main([
        "cv", "--synthetic", "growth", "--rows", "100", "--repetitions", "10",
        "--knots", "7", "--output", str(out),
    ])
    assert code == 0
    assert "Lowest median RMSE" in capsys.readouterr().out
    frame = pd.read_csv(out)
    assert set(frame["model_identifier"]) == {"linear", "piecewise", "smooth"}
    assert len(frame) == 30


def test_data_without_response_is_an_error(tmp_path, capsys):
    data = tmp_path / "line.csv"
    main(["simulate", "linear", "--rows", "20", "--output", str(data)])
    assert main(["cv", "--data", str(data)]) == 2
    assert "--response and --predictors" in capsys.readouterr().err


def test_invalid_fraction_is_an_error(capsys):
    code = main(["cv", "--synthetic", "linear", "--rows", "20", "--train-fraction", "1.5"])
    assert code == 2
    assert "train_fraction" in capsys.readouterr().err


def test_source_is_required():
    with pytest.raises(SystemExit):
        main(["bootstrap"])


def test_simulate_linear_uses_given_coefficients(tmp_path):
    out = tmp_path / "line.csv"
    code = main([
        "simulate", "linear", "--rows", "25", "--intercept", "-1", "--slope", "0.5",
        "--noise-std", "0", "--output", str(out),
    ])
    assert code == 0
    df = pd.read_csv(out)
    assert len(df) == 25
    assert (df["y"] - (-1 + 0.5 * df["x"])).abs().max() < 1e-9


def test_simulate_negative_noise_is_an_error(tmp_path, capsys):
    code = main(["simulate", "linear", "--noise-std", "-1", "--output", str(tmp_path / "x.csv")])
    assert code == 2
    assert "noise_std" in capsys.readouterr().err


def test_categorical_with_synthetic_is_an_error(capsys):
    code = main(["bootstrap", "--synthetic", "growth", "--categorical", "sex", "--repetitions", "5"])
    assert code == 2
    assert "--categorical" in capsys.readouterr().err


def test_empty_data_file_is_an_error(tmp_path, capsys):
    data = tmp_path / "empty.csv"
    data.write_text("")
    code = main(["cv", "--data", str(data), "--response", "y", "--predictors", "x"])
    assert code == 2
    assert "Cannot parse" in capsys.readouterr().err
