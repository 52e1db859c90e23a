from markupsafe import Markup
import pytest

from mky import Component, Environment
from mky.errors import CompileError, RenderError, TemplateNotFound, VariableNotFound
from mky.types import DirectoryType, TemplateId


class AccessorRow:
    def __init__(self, n):
        self._n = n

    def getN(self):
        return self._n


class TestBinding:

    def test_bind_renders_value(self, env: Environment):
        assert env.component("card").bind("title", "Hello").render() == "<div>Hello</div>"

    def test_bind_escapes_text(self, env: Environment):
        out = env.component("card").bind("title", "<b>").render()
        assert "<b>" not in out
        assert out == "<div>&lt;b&gt;</div>"

    def test_bind_keeps_markup(self, env: Environment):
        out = env.component("card").bind("title", Markup("<b>x</b>")).render()
        assert out == "<div><b>x</b></div>"

    def test_non_text_values_are_stored_as_is(self, env: Environment):
        comp = env.component("card").bind("title", 42)
        assert comp.variables["title"] == 42

    def test_multiple_bind(self, env: Environment):
        comp = env.component("card").multiple_bind({"title": "a&b", "other": 1})
        assert comp.variables == {"title": "a&amp;b", "other": 1}
        assert comp.render() == "<div>a&amp;b</div>"

    def test_str_renders(self, env: Environment):
        assert str(env.component("card").bind("title", "T")) == "<div>T</div>"

    def test_get_view(self, env: Environment):
        assert env.component("card").get_view() == "card"


class TestGate:

    def test_false_gate_renders_nothing(self, env: Environment):
        assert env.component("card").bind("title", "x").if_(False).render() == ""

    def test_false_gate_never_touches_compiler(self, env: Environment, monkeypatch):
        def fail(template):
            raise AssertionError("resolve must not be called")

        monkeypatch.setattr(env.cache, "resolve", fail)
        comp = env.component("does-not-exist").for_(3).if_(False)
        assert comp.render() == ""

    def test_true_gate_renders(self, env: Environment):
        assert env.component("card").bind("title", "x").if_(True).render() == "<div>x</div>"


class TestFor:

    def test_repeats_with_transform_in_order(self, env: Environment):
        seen = []

        def transform(scope, index):
            seen.append(index)
            scope["i"] = index
            return scope

        assert env.component("counter").for_(3, transform).render() == "[0][1][2]"
        assert seen == [0, 1, 2]

    def test_scope_carries_over_between_iterations(self, env: Environment):
        def transform(scope, index):
            scope["acc"] = scope.get("acc", "") + str(index)
            return scope

        assert env.component("acc").for_(3, transform).render() == "0;01;012;"

    def test_transform_may_replace_scope(self, env: Environment):
        out = env.component("counter").bind("i", "start").for_(2, lambda scope, i: {"i": i * 10}).render()
        assert out == "[0][10]"

    def test_transform_returning_none_keeps_mutated_scope(self, env: Environment):
        def transform(scope, index):
            scope["i"] = index + 1

        assert env.component("counter").for_(2, transform).render() == "[1][2]"

    def test_repeat_without_transform(self, env: Environment):
        assert env.component("card").bind("title", "x").for_(2).render() == "<div>x</div><div>x</div>"

    def test_zero_count_with_transform_renders_nothing(self, env: Environment):
        assert env.component("counter").for_(0, lambda scope, i: scope).render() == ""

    def test_zero_count_without_transform_renders_once(self, env: Environment):
        assert env.component("card").bind("title", "x").for_(0).render() == "<div>x</div>"


class TestEach:

    def test_mapping_binds(self, env: Environment):
        out = env.component("item").each([{"n": "a"}, {"n": "b"}], {"name": "n"}).render()
        assert out == "<li>a</li><li>b</li>"

    def test_mapping_binds_escape_text(self, env: Environment):
        out = env.component("item").each([{"n": "<i>"}], {"name": "n"}).render()
        assert out == "<li>&lt;i&gt;</li>"

    def test_dotted_paths_and_accessors(self, env: Environment):
        data = [{"user": AccessorRow("x")}, {"user": AccessorRow("y")}]
        out = env.component("item").each(data, {"name": "user.n"}).render()
        assert out == "<li>x</li><li>y</li>"

    def test_dict_data_iterates_values_in_order(self, env: Environment):
        data = {"k2": {"n": "b"}, "k1": {"n": "a"}}
        assert env.component("item").each(data, {"name": "n"}).render() == "<li>b</li><li>a</li>"

    def test_single_name_binds_whole_item(self, env: Environment):
        out = env.component("row").each([{"n": 1}, {"n": 2}], "row").render()
        assert out == "<li>1</li><li>2</li>"

    def test_callable_binds(self, env: Environment):
        def binds(scope, index, data):
            scope["name"] = f"{index}:{data[index]}"
            return scope

        assert env.component("item").each(["a", "b"], binds).render() == "<li>0:a</li><li>1:b</li>"

    def test_no_binds_uses_carried_scope(self, env: Environment):
        out = env.component("item").bind("name", "x").each([1, 2]).render()
        assert out == "<li>x</li><li>x</li>"

    def test_generator_data(self, env: Environment):
        rows = ({"n": c} for c in "ab")
        assert env.component("item").each(rows, {"name": "n"}).render() == "<li>a</li><li>b</li>"

    def test_empty_data_renders_other_view(self, env: Environment):
        out = env.component("item").each([], {"name": "n"}, "empty").render()
        assert out == "<p>empty</p>"

    def test_other_view_ignored_when_data_present(self, env: Environment):
        out = env.component("item").each([{"n": "a"}], {"name": "n"}, "empty").render()
        assert out == "<li>a</li>"

    def test_empty_data_with_binds_renders_nothing(self, env: Environment):
        assert env.component("item").each([], {"name": "n"}).render() == ""

    def test_missing_path_raises(self, env: Environment):
        with pytest.raises(VariableNotFound) as exc:
            env.component("item").each([{"n": "a"}], {"name": "missing"}).render()
        assert exc.value.kind == "array"
        assert exc.value.segment == "missing"
        assert exc.value.template == "item"

    def test_invalid_binds_type(self, env: Environment):
        with pytest.raises(TypeError):
            env.component("item").each([1], 42)


class TestComposition:

    def test_nested_component_through_handle(self, env: Environment):
        comp = env.component("list").bind("items", [{"n": "a"}, {"n": "b"}])
        assert comp.render() == "<ul><li>a</li><li>b</li></ul>"

    def test_child_scope_is_isolated(self, env: Environment):
        assert env.component("parent").bind("secret", "s3").render() == "s3|none"

    def test_child_factory(self, env: Environment):
        parent = env.component("card").bind("title", "p")
        child = parent.component("card")
        assert isinstance(child, Component)
        assert child.variables == {}
        assert child.view_compiler.get_environment() is env

    def test_directive_in_component(self, env: Environment):
        assert env.component("flag").bind("active", True).render() == "on"
        assert env.component("flag").bind("active", False).render() == "off"


class TestErrors:

    def test_missing_template(self, env: Environment):
        with pytest.raises(TemplateNotFound):
            env.component("nope").render()

    def test_compile_error(self, env: Environment):
        with pytest.raises(CompileError):
            env.component("bad").render()

    def test_render_error_carries_template(self, env: Environment):
        with pytest.raises(RenderError) as exc:
            env.component("broken").render()
        assert exc.value.template == TemplateId(DirectoryType.COMPONENT, "broken")

    def test_nested_errors_propagate_unchanged(self, env: Environment, tmpproj):
        from tests.infrastructure.file_utils import write
        write(tmpproj / "templates" / "components" / "outer.html", "{{ this.component('nope') }}")
        with pytest.raises(TemplateNotFound) as exc:
            env.component("outer").render()
        assert exc.value.template.name == "nope"
