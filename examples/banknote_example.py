"""Trains and evaluates a decision tree end to end with logging enabled.

runetree logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle`` usable as a context manager.

Key concepts shown here:

- ``TreeSettings``: classifier defaults read from ``RUNETREE_*`` environment
  variables (``RUNETREE_MAX_DEPTH``, ``RUNETREE_MIN_SIZE``, ``RUNETREE_MEASURE``,
  ``RUNETREE_LOG_LEVEL``).
- ``level``: ``"INFO"`` logs one record per fit, ``"DEBUG"`` one per node, and
  ``"SPLIT"`` one per scored candidate split.
- Evaluation with ``train_test_split`` and ``ConfusionMatrix``.

Pass the path to ``data_banknote_authentication.csv`` as the first argument to
use the banknote dataset; otherwise a synthetic XOR dataset is used.
"""

import sys

from runetree import DecisionTreeClassifier, TreeSettings, enable_logging
from runetree.datasets import make_xor_dataset, read_banknote_authentication_dataset
from runetree.metrics import ConfusionMatrix
from runetree.model_selection import train_test_split
from runetree.rules import summarize

settings = TreeSettings()

if len(sys.argv) > 1:
    x, y = read_banknote_authentication_dataset(sys.argv[1])
else:
    x, y = make_xor_dataset(200)

with enable_logging(level=settings.log_level, log_format="full"):
    x_train, x_test, y_train, y_test = train_test_split(x, y, 0.8, seed=7)

    classifier = DecisionTreeClassifier.from_settings(settings)
    print(f"Decision tree: {classifier!r}")

    model = classifier.fit(x_train, y_train)
    print(f"Trained model: {model!r}")

    for rule in summarize(model).rules:
        print(rule)

    y_pred = model.predict(x_test)
    cm = ConfusionMatrix.from_predictions(y_test, y_pred)
    print(f"Confusion matrix: {cm.matrix}")
    print(f"recall:    {cm.recall}")
    print(f"precision: {cm.precision}")
    print(f"f1:        {cm.f1}")

# Logging automatically disabled here
