"""
Tests for configuration and logging setup.
"""

import io
import logging
import os
import subprocess
import sys

import pytest

from topic_clustering.config import (
    Config,
    ReductionConfig,
    ScoringWeights,
    TuningConfig,
    get_config,
)
from topic_clustering.utils.logging_config import (
    PACKAGE_LOGGER_NAME,
    get_logger,
    setup_logging,
)

ENV_VARS = [
    "TOPIC_CLUSTERING_LOG_LEVEL",
    "TOPIC_CLUSTERING_WEIGHT_SILHOUETTE",
    "TOPIC_CLUSTERING_WEIGHT_DAVIES_BOULDIN",
    "TOPIC_CLUSTERING_WEIGHT_NUM_CLUSTERS",
    "TOPIC_CLUSTERING_TARGET_CLUSTERS",
    "TOPIC_CLUSTERING_REDUCTION",
    "TOPIC_CLUSTERING_REDUCTION_DIMS",
    "TOPIC_CLUSTERING_MAX_WORKERS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ------------------------------------------------------------------
# Dataclasses
# ------------------------------------------------------------------


def test_tuning_config_defaults():
    cfg = TuningConfig()
    assert cfg.scoring_weights == ScoringWeights(0.6, 0.3, 0.1)
    assert cfg.target_clusters == 5
    assert cfg.reduction.enabled is False
    assert cfg.reduction.method == "pca"
    assert cfg.max_workers is None


def test_scoring_weights_reject_negative():
    with pytest.raises(ValueError, match="silhouette"):
        ScoringWeights(silhouette=-0.1)


def test_reduction_config_validation():
    with pytest.raises(ValueError):
        ReductionConfig(method="tsne")
    with pytest.raises(ValueError):
        ReductionConfig(target_dimensions=0)


def test_tuning_config_validation():
    with pytest.raises(ValueError):
        TuningConfig(target_clusters=0)
    with pytest.raises(ValueError):
        TuningConfig(max_workers=0)


# ------------------------------------------------------------------
# Config (environment)
# ------------------------------------------------------------------


def test_config_defaults(clean_env):
    cfg = Config()
    assert cfg.log_level == "INFO"
    assert cfg.tuning == TuningConfig()


def test_config_from_environment(clean_env):
    clean_env.setenv("TOPIC_CLUSTERING_LOG_LEVEL", "debug")
    clean_env.setenv("TOPIC_CLUSTERING_WEIGHT_SILHOUETTE", "0.5")
    clean_env.setenv("TOPIC_CLUSTERING_WEIGHT_DAVIES_BOULDIN", "0.25")
    clean_env.setenv("TOPIC_CLUSTERING_WEIGHT_NUM_CLUSTERS", "0.25")
    clean_env.setenv("TOPIC_CLUSTERING_TARGET_CLUSTERS", "8")
    clean_env.setenv("TOPIC_CLUSTERING_REDUCTION", "UMAP")
    clean_env.setenv("TOPIC_CLUSTERING_REDUCTION_DIMS", "3")
    clean_env.setenv("TOPIC_CLUSTERING_MAX_WORKERS", "4")

    cfg = Config()

    assert cfg.log_level == "DEBUG"
    assert cfg.tuning.scoring_weights == ScoringWeights(0.5, 0.25, 0.25)
    assert cfg.tuning.target_clusters == 8
    assert cfg.tuning.reduction == ReductionConfig(enabled=True, method="umap", target_dimensions=3)
    assert cfg.tuning.max_workers == 4


def test_config_reduction_none(clean_env):
    clean_env.setenv("TOPIC_CLUSTERING_REDUCTION", "none")
    assert Config().tuning.reduction.enabled is False


def test_config_invalid_number(clean_env):
    clean_env.setenv("TOPIC_CLUSTERING_TARGET_CLUSTERS", "lots")
    with pytest.raises(ValueError, match="TOPIC_CLUSTERING_TARGET_CLUSTERS"):
        Config()


def test_config_invalid_reduction(clean_env):
    clean_env.setenv("TOPIC_CLUSTERING_REDUCTION", "tsne")
    with pytest.raises(ValueError):
        Config()


@pytest.fixture
def fresh_config(clean_env):
    get_config.cache_clear()
    yield clean_env
    get_config.cache_clear()


def test_get_config_is_shared(fresh_config):
    assert get_config() is get_config()
    assert get_config().tuning == TuningConfig()


def test_get_config_reports_bad_environment(fresh_config):
    fresh_config.setenv("TOPIC_CLUSTERING_TARGET_CLUSTERS", "0")
    with pytest.raises(ValueError):
        get_config()


def test_bad_environment_does_not_break_import():
    env = dict(os.environ, TOPIC_CLUSTERING_TARGET_CLUSTERS="0")
    completed = subprocess.run(
        [sys.executable, "-c", "import topic_clustering, topic_clustering.algorithms"],
        env=env,
        capture_output=True,
        text=True,
    )
    assert completed.returncode == 0, completed.stderr


# ------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------


def test_get_logger_namespace():
    assert get_logger("custom").name == "topic_clustering.custom"
    assert get_logger("topic_clustering.algorithms.tuning").name == "topic_clustering.algorithms.tuning"
    assert get_logger(PACKAGE_LOGGER_NAME).name == PACKAGE_LOGGER_NAME


def test_setup_logging_idempotent():
    setup_logging("INFO")
    logger = setup_logging("DEBUG")
    handlers = [h for h in logger.handlers if getattr(h, "_topic_clustering_handler", False)]
    assert len(handlers) == 1
    assert logger.level == logging.DEBUG


def test_setup_logging_stream():
    stream = io.StringIO()
    setup_logging("warning", stream=stream)
    get_logger("test").warning("something happened")
    get_logger("test").info("not shown")
    output = stream.getvalue()
    assert "[WARNING] topic_clustering.test: something happened" in output
    assert "not shown" not in output


def test_setup_logging_unknown_level_falls_back_to_info():
    logger = setup_logging("chatty")
    assert logger.level == logging.INFO
