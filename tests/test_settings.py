import importlib
import os

import dotenv
import pytest

from querymaker import LookupOptions, PipelineBuilder, settings

ENV_NAMES = ("QUERYMAKER_SOFT_DELETE_FIELD", "QUERYMAKER_LET_SUFFIX")


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    yield
    for name in ENV_NAMES:
        os.environ.pop(name, None)
    settings.refresh()


def test_defaults(clean_env):
    settings.refresh()

    assert settings.SOFT_DELETE_FIELD == "deletedAt"
    assert settings.LET_SUFFIX == "_tmp"


def test_environment_overrides(clean_env):
    os.environ["QUERYMAKER_SOFT_DELETE_FIELD"] = "removedAt"
    os.environ["QUERYMAKER_LET_SUFFIX"] = "_ref"
    settings.refresh()
    builder = PipelineBuilder()

    assert builder.soft_delete_field == "removedAt"
    assert builder.let_variable("user_id") == "userid_ref"


def test_import_does_not_load_env_file(clean_env, monkeypatch):
    calls = []
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *args, **kwargs: calls.append(args))
    try:
        importlib.reload(settings)
    finally:
        monkeypatch.undo()
        importlib.reload(settings)

    assert calls == []


def test_load_env_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "QUERYMAKER_SOFT_DELETE_FIELD=archivedAt\nQUERYMAKER_LET_SUFFIX=_v\n",
        encoding="utf-8",
    )

    settings.load_env_file(env_file)

    assert settings.SOFT_DELETE_FIELD == "archivedAt"
    assert settings.LET_SUFFIX == "_v"


def test_constructor_arguments_win(monkeypatch):
    monkeypatch.setattr(settings, "SOFT_DELETE_FIELD", "removedAt")
    builder = PipelineBuilder(soft_delete_field="archivedAt", let_suffix="_v")

    lookup = builder.lookup("orders", "user_id", "userId", "orders", LookupOptions(exposes=["total"])).get()[0]["$lookup"]

    assert lookup["let"] == {"userid_v": "$user_id"}
    soft_delete = lookup["pipeline"][0]["$match"]["$expr"]["$and"][-1]
    assert soft_delete["$or"][0] == {"$eq": [{"$type": "$archivedAt"}, "missing"]}


def test_empty_constructor_arguments_are_kept(monkeypatch):
    monkeypatch.setattr(settings, "SOFT_DELETE_FIELD", "removedAt")
    monkeypatch.setattr(settings, "LET_SUFFIX", "_tmp")
    builder = PipelineBuilder(soft_delete_field="", let_suffix="")

    assert builder.soft_delete_field == ""
    assert builder.let_variable("user_id") == "userid"
