import time
from pathlib import Path

import pytest

from mky import Environment
from mky.cache import FileStore, cache_key
from mky.errors import CompileError, TemplateNotFound, UnknownDirective
from mky.types import DirectoryType, TemplateId
from tests.infrastructure.file_utils import set_mtime, write
from tests.infrastructure.project_builders import make_environment

CARD = TemplateId(DirectoryType.COMPONENT, "card")
FLAG = TemplateId(DirectoryType.COMPONENT, "flag")


def _count_compiles(env: Environment, monkeypatch) -> dict:
    calls = {"compile": 0}
    orig = env.cache.compiler.compile

    def wrapped(source: str) -> str:
        calls["compile"] += 1
        return orig(source)

    monkeypatch.setattr(env.cache.compiler, "compile", wrapped)
    return calls


def test_resolve_returns_same_artifact_for_unchanged_source(env: Environment, monkeypatch):
    calls = _count_compiles(env, monkeypatch)

    a1 = env.cache.resolve(CARD)
    a2 = env.cache.resolve(CARD)

    assert a1 is a2
    assert a1.template == CARD
    assert calls["compile"] == 1


def test_artifact_holds_lowered_code(env: Environment):
    artifact = env.cache.resolve(FLAG)
    assert artifact.code == "{% if active %}on{% else %}off{% endif %}"


def test_recompiles_when_source_mtime_advances(env: Environment, tmpproj: Path, monkeypatch):
    src = tmpproj / "templates" / "components" / "card.html"
    past = time.time() - 100
    set_mtime(src, past)
    calls = _count_compiles(env, monkeypatch)

    first = env.cache.resolve(CARD)
    assert env.cache.resolve(CARD) is first

    write(src, "<section>{{ title }}</section>")
    set_mtime(src, time.time() + 50)

    second = env.cache.resolve(CARD)
    assert second is not first
    assert second.code == "<section>{{ title }}</section>"
    assert env.cache.resolve(CARD) is second
    assert calls["compile"] == 2


def test_missing_template(env: Environment):
    with pytest.raises(TemplateNotFound) as exc:
        env.cache.resolve(TemplateId(DirectoryType.COMPONENT, "nope"))
    assert exc.value.template.name == "nope"


def test_name_cannot_escape_root(env: Environment, tmpproj: Path):
    write(tmpproj / "templates" / "secret.html", "secret")
    with pytest.raises(TemplateNotFound):
        env.cache.resolve(TemplateId(DirectoryType.COMPONENT, "../secret"))


def test_compile_error_wraps_directive_error(env: Environment):
    with pytest.raises(CompileError) as exc:
        env.cache.resolve(TemplateId(DirectoryType.COMPONENT, "bad"))
    assert isinstance(exc.value.cause, UnknownDirective)
    assert isinstance(exc.value.__cause__, UnknownDirective)
    assert exc.value.template.name == "bad"


def test_cache_key_is_stable_per_role_and_name():
    assert cache_key(CARD) == cache_key(TemplateId(DirectoryType.COMPONENT, "card"))
    assert cache_key(CARD) != cache_key(TemplateId(DirectoryType.VIEW, "card"))


def test_disk_cache_survives_new_environment(cached_env: Environment, tmpproj: Path, monkeypatch):
    artifact = cached_env.cache.resolve(FLAG)

    fresh = make_environment(tmpproj, cache_dir=tmpproj / ".mky-cache")

    def fail(source: str) -> str:
        raise AssertionError("must be served from disk")

    monkeypatch.setattr(fresh.cache.compiler, "compile", fail)
    loaded = fresh.cache.resolve(FLAG)
    assert loaded.code == artifact.code
    assert loaded.template == FLAG
    assert fresh.cache.resolve(FLAG) is loaded


def test_disk_entry_layout(cached_env: Environment, tmpproj: Path):
    cached_env.cache.resolve(CARD)
    key = cache_key(CARD)
    assert (tmpproj / ".mky-cache" / "views" / key[:2] / key[2:4] / f"{key}.json").is_file()


def test_snapshot_and_purge(cached_env: Environment):
    cached_env.cache.resolve(CARD)
    cached_env.cache.resolve(FLAG)

    snap = cached_env.cache.snapshot()
    assert snap.enabled and snap.exists
    assert snap.entries == 2
    assert snap.size_bytes > 0

    cached_env.cache.purge()
    assert cached_env.cache.snapshot().entries == 0
    assert len(cached_env.cache.memory) == 0


def test_env_var_disables_disk_cache(tmpproj: Path, monkeypatch):
    monkeypatch.setenv("MKY_CACHE", "off")
    env = make_environment(tmpproj, cache_dir=tmpproj / ".mky-cache")
    assert env.cache.store is None
    env.cache.resolve(CARD)
    assert not (tmpproj / ".mky-cache" / "views").exists()
    assert env.cache.snapshot().enabled is False


def test_corrupted_disk_entry_is_recompiled(cached_env: Environment, tmpproj: Path):
    store = cached_env.cache.store
    assert isinstance(store, FileStore)
    key = cache_key(CARD)
    write(store._bucket_path(key), "{not json")

    fresh = make_environment(tmpproj, cache_dir=tmpproj / ".mky-cache")
    assert fresh.cache.resolve(CARD).code == "<div>{{ title }}</div>"


def test_evaluator_keeps_one_template_per_source_across_edits(env: Environment, tmpproj: Path):
    src = tmpproj / "templates" / "components" / "card.html"
    base = time.time()

    for i in range(10):
        write(src, f"<div>{i}:{{{{ title }}}}</div>")
        set_mtime(src, base + 100 * (i + 1))
        assert env.component("card").bind("title", "t").render() == f"<div>{i}:t</div>"

    assert len(env.evaluator) == 1
    assert len(env.cache.memory) == 1
