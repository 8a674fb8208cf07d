from pathlib import Path

import pytest

from lodprep import build_db, cli
from lodprep.dsp.windows import WindowKind
from lodprep.io.store import Store
from lodprep.util.exit_codes import ExitCode

_ENV_VARS = ("LODPREP_BLOCK_SIZE", "LODPREP_SAMPLING_INTERVAL", "LODPREP_WINDOW", "LODPREP_FREQUENCY_MODE")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_window_defaults_to_rectangular() -> None:
    args = cli.parse_args(["measurements.db"])
    assert args.database == "measurements.db"
    assert args.pipeline_config.window is WindowKind.RECTANGULAR


@pytest.mark.parametrize(
    "flag,kind",
    [
        ("--hamming", WindowKind.HAMMING),
        ("--blackman", WindowKind.BLACKMAN),
        ("--blackman-harris", WindowKind.BLACKMAN_HARRIS),
    ],
)
def test_single_window_flag_selects_kind(flag: str, kind: WindowKind) -> None:
    assert cli.parse_args(["db", flag]).pipeline_config.window is kind


def test_conflicting_window_flags_are_rejected() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["db", "--hamming", "--blackman"])
    assert excinfo.value.code == ExitCode.INVALID_ARGS


def test_zero_block_size_is_rejected_before_running() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["db", "--block-size", "0"])
    assert excinfo.value.code == ExitCode.INVALID_ARGS


def test_sensor_count_expands_to_ids() -> None:
    config = cli.parse_args(["db", "--sensors", "3", "--measurement", "2", "--measurement", "1"]).pipeline_config
    assert config.sensor_ids == (1, 2, 3)
    assert config.measurement_ids == (1, 2)


def test_missing_database_exits_with_acquisition_error(tmp_path: Path) -> None:
    assert cli.main([str(tmp_path / "nope.db")]) == ExitCode.ACQUISITION_ERROR


def test_build_then_analyse(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    db_path = str(tmp_path / "measurements.db")
    assert build_db.main([db_path, "-s", "2", "-m", "3", "-b", "2"]) == ExitCode.SUCCESS
    assert cli.main([db_path, "--blackman", "--measurement", "2"]) == ExitCode.SUCCESS
    assert "rows=256" in capsys.readouterr().out

    store = Store(db_path)
    rows = store.load_feature_rows()
    store.close()
    assert len(rows) == 2 * 2 * 64
    assert {r.measurement_id for r in rows} == {2}


def _built_db(tmp_path: Path) -> str:
    db_path = str(tmp_path / "measurements.db")
    assert build_db.main([db_path, "-s", "1", "-m", "1", "-b", "1"]) == ExitCode.SUCCESS
    return db_path


def test_rejected_write_exits_with_persistence_error(tmp_path: Path) -> None:
    db_path = _built_db(tmp_path)
    store = Store(db_path)
    store.con.execute(
        """
        CREATE TRIGGER reject_training_values BEFORE INSERT ON training_values
        BEGIN SELECT RAISE(ABORT, 'disk full'); END
        """
    )
    store.commit()
    store.close()

    assert cli.main([db_path]) == ExitCode.PERSISTENCE_ERROR


def test_unexpected_error_exits_with_general_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    db_path = _built_db(tmp_path)

    def _broken_run_analysis(config, store):
        raise RuntimeError("analyser crashed")

    monkeypatch.setattr(cli, "run_analysis", _broken_run_analysis)
    assert cli.main([db_path]) == ExitCode.GENERAL_ERROR


def test_unexpected_build_error_exits_with_general_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _broken_populate(store, config, measurement_ids, sensor_ids):
        raise RuntimeError("generator crashed")

    monkeypatch.setattr(build_db, "populate", _broken_populate)
    assert build_db.main([str(tmp_path / "measurements.db")]) == ExitCode.GENERAL_ERROR


def test_non_integer_sample_exits_with_acquisition_error(tmp_path: Path) -> None:
    db_path = _built_db(tmp_path)
    store = Store(db_path)
    store.con.execute("UPDATE measured_values SET i_value = 'abc' WHERE item_id = 0")
    store.commit()
    store.close()

    assert cli.main([db_path]) == ExitCode.ACQUISITION_ERROR


def test_every_exit_code_has_a_message() -> None:
    codes = [ExitCode.SUCCESS, ExitCode.GENERAL_ERROR, ExitCode.INVALID_ARGS, ExitCode.ACQUISITION_ERROR, ExitCode.PERSISTENCE_ERROR]
    messages = [ExitCode.message(code) for code in codes]
    assert len(set(messages)) == len(codes)
    assert ExitCode.message(99) == "Unknown exit code 99"
