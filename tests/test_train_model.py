import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from smart_categorizer import train_model
from smart_categorizer.classifiers.ml import MLClassifier


def test_run_writes_loadable_model(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output = tmp_path / "models" / "categorization_model.pkl"

    assert train_model.run(str(output)) is True

    restored = MLClassifier.from_bytes(output.read_bytes())
    assert restored.num_classes() == 13
    printed = capsys.readouterr().out
    assert "cat_groceries" in printed
    assert "Vocabulary size" in printed


def test_main_exits_with_status(tmp_path: Path) -> None:
    output = tmp_path / "model.pkl"
    with patch.object(sys, "argv", ["train_model", "--output", str(output)]):
        with pytest.raises(SystemExit) as excinfo:
            train_model.main()

    assert excinfo.value.code == 0
    assert output.exists()
