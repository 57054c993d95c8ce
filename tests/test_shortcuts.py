import pytest

from hookwire import shortcuts
from hookwire.registry import HookRegistry


@pytest.fixture(autouse=True)
def fresh_registry(monkeypatch: pytest.MonkeyPatch) -> HookRegistry:
    registry = HookRegistry()
    monkeypatch.setattr(shortcuts, "hooks", registry)
    return registry


def test_module_functions_share_the_process_registry(fresh_registry: HookRegistry) -> None:
    shortcuts.add_filter("title", str.strip, 5)
    shortcuts.add_filter("title", str.title)

    assert shortcuts.get_registry() is fresh_registry
    assert shortcuts.has_filter("title", str.strip) == 5
    assert shortcuts.apply_filters("title", "  hello world ") == "Hello World"
    assert shortcuts.apply_filters_with_args("title", ["  abc "]) == "Abc"

    assert shortcuts.remove_filter("title", str.strip, 5) is True
    assert shortcuts.remove_all_filters("title") is True
    assert shortcuts.has_filter("title") is False


def test_module_action_functions() -> None:
    log: list[str] = []

    shortcuts.add_action("saved", log.append)
    shortcuts.do_action("saved", "post-1")
    shortcuts.do_action_with_args("saved", ["post-2"])

    assert log == ["post-1", "post-2"]
    assert shortcuts.did_action("saved") == 2
    assert shortcuts.has_action("saved", log.append) == 10
    assert shortcuts.remove_action("saved", log.append) is True
    assert shortcuts.remove_all_actions("saved") is True
    assert shortcuts.current_hook() is None
    assert shortcuts.doing_filter() is False
    assert shortcuts.doing_action("saved") is False


def test_decorators_register_and_return_function() -> None:
    seen: list[tuple[str, str]] = []

    @shortcuts.on_filter("slug", priority=1)
    def lower(value):
        return value.lower()

    @shortcuts.on_action("published", accepted_args=2)
    def announce(post, channel):
        seen.append((post, channel))

    assert lower("ABC") == "abc"
    assert shortcuts.apply_filters("slug", "Hello") == "hello"

    shortcuts.do_action("published", "post", "feed", "ignored")
    assert seen == [("post", "feed")]
    assert shortcuts.remove_filter("slug", lower, 1) is True


def test_decorators_accept_explicit_registry(fresh_registry: HookRegistry) -> None:
    other = HookRegistry()

    @shortcuts.on_filter("slug", registry=other)
    def lower(value):
        return value.lower()

    assert other.apply_filters("slug", "ABC") == "abc"
    assert fresh_registry.has_filter("slug") is False
