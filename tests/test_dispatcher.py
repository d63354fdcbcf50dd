import curses
import random
import unittest
from datetime import date

from dispatcher import HANDLERS, Action, DispatchResult, MenuCommands, action_for_key, dispatch
from menu_state import Item, MenuState
from tui_base import ActionError

GB = 1024 ** 3


class FakeCommands(MenuCommands):
    def __init__(self, *, prompt_answers=(), confirm_answer=True, fail_with=None):
        self.prompt_answers = list(prompt_answers)
        self.confirm_answer = confirm_answer
        self.fail_with = fail_with
        self.prompts = []
        self.questions = []
        self.messages = []
        self.calls = []

    def prompt(self, title, initial=""):
        self.prompts.append((title, initial))
        return self.prompt_answers.pop(0) if self.prompt_answers else None

    def confirm(self, question, *, default):
        self.questions.append((question, default))
        return self.confirm_answer

    def notify(self, message, *, warning=False):
        self.messages.append((message, warning))

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    def create_item(self, name):
        self._record("create", name)

    def delete_items(self, names):
        self._record("delete", list(names))

    def update_items(self, names):
        self._record("update", list(names))

    def run_foreground(self, item):
        self._record("run", item.name)
        return 0

    def run_service(self, action):
        self._record("service", action)


def sample_state():
    return MenuState.from_items(
        [
            Item("llama3:latest", int(4.9 * GB), date(2024, 4, 24)),
            Item("gemma:2b", int(2.1 * GB), date(2024, 3, 15)),
            Item("llama2:latest", int(7.3 * GB), date(2024, 1, 2)),
        ]
    )


class KeyMappingTests(unittest.TestCase):
    def test_every_action_has_a_handler(self):
        self.assertEqual(set(HANDLERS), set(Action))

    def test_known_keys(self):
        self.assertEqual(action_for_key(curses.KEY_DOWN), Action.MOVE_DOWN)
        self.assertEqual(action_for_key(ord("k")), Action.MOVE_UP)
        self.assertEqual(action_for_key(ord(" ")), Action.TOGGLE_SELECT)
        self.assertEqual(action_for_key(ord("r")), Action.ACTIVATE)
        self.assertEqual(action_for_key(ord("R")), Action.REFRESH)
        self.assertEqual(action_for_key(27), Action.QUIT)
        self.assertEqual(action_for_key(ord("?")), Action.TOGGLE_FOOTER)
        self.assertEqual(action_for_key(ord("z")), Action.NOOP)


class EndToEndTests(unittest.TestCase):
    def test_down_down_space_delete(self):
        state = sample_state()
        ctx = FakeCommands(confirm_answer=True)
        self.assertEqual([i.name for i in state.items], ["All", "gemma:2b", "llama2:latest", "llama3:latest"])

        self.assertEqual(state.current_item.name, "gemma:2b")
        dispatch(curses.KEY_DOWN, state, ctx, 4)
        dispatch(curses.KEY_DOWN, state, ctx, 4)
        self.assertEqual(dispatch(ord(" "), state, ctx, 4), DispatchResult.REDRAW)
        self.assertEqual(state.selected, {"llama3:latest"})

        result = dispatch(ord("d"), state, ctx, 4)
        self.assertEqual(result, DispatchResult.REFRESH_DATA)
        self.assertEqual(ctx.calls, [("delete", ["llama3:latest"])])
        self.assertFalse(ctx.questions[0][1])
        self.assertEqual(state.scroll_offset, 0)
        self.assertEqual(state.selected, set())


class BulkActionTests(unittest.TestCase):
    def test_all_never_targets_synthetic_item(self):
        state = sample_state()
        state.cursor = 0
        ctx = FakeCommands()
        dispatch(ord(" "), state, ctx, 4)
        self.assertTrue(state.all_selected)
        self.assertEqual(dispatch(ord("u"), state, ctx, 4), DispatchResult.REFRESH_DATA)
        self.assertEqual(ctx.calls, [("update", ["gemma:2b", "llama2:latest", "llama3:latest"])])

    def test_nothing_to_act_on_warns(self):
        state = sample_state()
        state.cursor = 0
        ctx = FakeCommands()
        self.assertEqual(dispatch(ord("d"), state, ctx, 4), DispatchResult.REDRAW)
        self.assertEqual(ctx.calls, [])
        self.assertTrue(ctx.messages[0][1])
        self.assertEqual(ctx.questions, [])

    def test_cancelled_confirmation_changes_nothing(self):
        state = sample_state()
        state.cursor = 2
        state.selected.add("gemma:2b")
        state.scroll_offset = 0
        ctx = FakeCommands(confirm_answer=False)
        self.assertEqual(dispatch(ord("d"), state, ctx, 2), DispatchResult.REDRAW)
        self.assertEqual(ctx.calls, [])
        self.assertEqual(state.selected, {"gemma:2b"})
        self.assertEqual(state.cursor, 2)

    def test_action_error_is_reported_and_refreshes(self):
        state = sample_state()
        state.cursor = 1
        ctx = FakeCommands(fail_with=ActionError("'ollama' command not found"))
        self.assertEqual(dispatch(ord("u"), state, ctx, 4), DispatchResult.REFRESH_DATA)
        self.assertEqual(ctx.messages, [("'ollama' command not found", True)])


class ActivateTests(unittest.TestCase):
    def test_rejects_all_item(self):
        state = sample_state()
        state.cursor = 0
        ctx = FakeCommands()
        self.assertEqual(dispatch(ord("r"), state, ctx, 4), DispatchResult.REDRAW)
        self.assertEqual(ctx.calls, [])
        self.assertEqual(len(ctx.messages), 1)

    def test_runs_current_item_and_refreshes(self):
        state = sample_state()
        state.cursor = 1
        ctx = FakeCommands()
        self.assertEqual(dispatch(ord("\n"), state, ctx, 4), DispatchResult.REFRESH_DATA)
        self.assertEqual(ctx.calls, [("run", "gemma:2b")])

    def test_cancel_does_not_run(self):
        state = sample_state()
        state.cursor = 1
        ctx = FakeCommands(confirm_answer=False)
        self.assertEqual(dispatch(ord("r"), state, ctx, 4), DispatchResult.REDRAW)
        self.assertEqual(ctx.calls, [])

    def test_empty_list_is_noop(self):
        ctx = FakeCommands()
        self.assertEqual(dispatch(ord("r"), MenuState(), ctx, 4), DispatchResult.NOOP)


class AddAndFilterTests(unittest.TestCase):
    def test_add_pulls_valid_name(self):
        ctx = FakeCommands(prompt_answers=["llama3"])
        self.assertEqual(dispatch(ord("a"), sample_state(), ctx, 4), DispatchResult.REFRESH_DATA)
        self.assertEqual(ctx.calls, [("create", "llama3")])

    def test_add_cancel_redraws(self):
        ctx = FakeCommands(prompt_answers=[None])
        self.assertEqual(dispatch(ord("a"), sample_state(), ctx, 4), DispatchResult.REDRAW)
        self.assertEqual(ctx.calls, [])

    def test_add_rejects_invalid_name(self):
        ctx = FakeCommands(prompt_answers=["bad name"])
        self.assertEqual(dispatch(ord("a"), sample_state(), ctx, 4), DispatchResult.REDRAW)
        self.assertEqual(ctx.calls, [])
        self.assertTrue(ctx.messages)

    def test_filter_prompt_is_seeded(self):
        state = sample_state()
        state.filter_text = "llama"
        ctx = FakeCommands(prompt_answers=["gem"])
        self.assertEqual(dispatch(ord("f"), state, ctx, 4), DispatchResult.REFRESH_DATA)
        self.assertEqual(ctx.prompts[0][1], "llama")
        self.assertEqual([i.name for i in state.items], ["All", "gemma:2b"])

    def test_filter_cancel_keeps_filter(self):
        state = sample_state()
        state.set_filter("llama")
        ctx = FakeCommands(prompt_answers=[None])
        self.assertEqual(dispatch(ord("f"), state, ctx, 4), DispatchResult.REDRAW)
        self.assertEqual(state.filter_text, "llama")

    def test_clear_filter(self):
        state = sample_state()
        ctx = FakeCommands()
        self.assertEqual(dispatch(ord("l"), state, ctx, 4), DispatchResult.NOOP)
        state.set_filter("gem")
        state.scroll_offset = 1
        self.assertEqual(dispatch(ord("l"), state, ctx, 4), DispatchResult.REFRESH_DATA)
        self.assertEqual(state.filter_text, "")
        self.assertEqual(state.scroll_offset, 0)


class FooterActionTests(unittest.TestCase):
    def test_service_keys_need_expanded_footer(self):
        state = sample_state()
        ctx = FakeCommands()
        self.assertEqual(dispatch(ord("s"), state, ctx, 4), DispatchResult.NOOP)
        self.assertEqual(dispatch(ord("?"), state, ctx, 4), DispatchResult.REDRAW)
        self.assertTrue(state.footer_expanded)
        self.assertEqual(dispatch(ord("s"), state, ctx, 4), DispatchResult.REFRESH_DATA)
        self.assertEqual(ctx.calls, [("service", "stop")])
        self.assertFalse(ctx.questions[-1][1])

    def test_service_cancel(self):
        state = sample_state()
        state.footer_expanded = True
        ctx = FakeCommands(confirm_answer=False)
        self.assertEqual(dispatch(ord("e"), state, ctx, 4), DispatchResult.REDRAW)
        self.assertEqual(ctx.calls, [])

    def test_quit_and_unknown(self):
        ctx = FakeCommands()
        self.assertEqual(dispatch(ord("q"), sample_state(), ctx, 4), DispatchResult.EXIT)
        self.assertEqual(dispatch(ord("x"), sample_state(), ctx, 4), DispatchResult.NOOP)


class ScrollConsistencyTests(unittest.TestCase):
    def test_random_navigation_keeps_cursor_visible(self):
        rng = random.Random(1234)
        items = [Item(f"model-{i:02d}", GB) for i in range(25)]
        keys = [curses.KEY_UP, curses.KEY_DOWN, curses.KEY_PPAGE, curses.KEY_NPAGE, curses.KEY_HOME, curses.KEY_END]
        ctx = FakeCommands()
        for viewport_height in (1, 3, 4, 7, 30):
            state = MenuState.from_items(items)
            for _ in range(300):
                dispatch(rng.choice(keys), state, ctx, viewport_height)
                count = len(state.items)
                self.assertLessEqual(state.scroll_offset, state.cursor)
                self.assertLess(state.cursor, state.scroll_offset + viewport_height)
                self.assertGreaterEqual(state.scroll_offset, 0)
                self.assertLessEqual(state.scroll_offset, max(0, count - viewport_height))

    def test_cursor_five_in_four_row_viewport(self):
        state = MenuState.from_items([Item(f"m{i:02d}", GB) for i in range(19)])
        state.cursor = 0
        ctx = FakeCommands()
        for _ in range(5):
            dispatch(ord("j"), state, ctx, 4)
        self.assertEqual(state.cursor, 5)
        self.assertEqual(state.scroll_offset, 2)


if __name__ == "__main__":
    unittest.main()
