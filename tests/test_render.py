import unittest

from nettui.normalize import EMPTY_SNAPSHOT, ConnectionRecord, InterfaceRecord, PortRecord, Snapshot
from nettui.render import (
    PLACEHOLDER,
    Segment,
    clip_line,
    display_width,
    format_bytes,
    frame_text,
    render_frame,
    truncate,
)
from nettui.state import FIXED_CHROME_ROWS, Action, DashboardState, KeyEvent, Tab, update


def ports(n):
    return tuple(PortRecord(1000 + i, "tcp", "*", 100 + i, f"svc{i}") for i in range(n))


class TestTruncate(unittest.TestCase):
    def test_fits_unchanged(self):
        self.assertEqual(truncate("abc", 3), "abc")
        self.assertEqual(truncate("abc", 10), "abc")
        self.assertEqual(truncate("", 0), "")

    def test_narrow_columns_cut_without_marker(self):
        self.assertEqual(truncate("abcdef", 3), "abc")
        self.assertEqual(truncate("abcdef", 1), "a")
        self.assertEqual(truncate("abcdef", 0), "")

    def test_ellipsis(self):
        self.assertEqual(truncate("abcdef", 4), "a...")
        self.assertEqual(truncate("systemd-resolved", 10), "systemd...")

    def test_length_always_equals_limit_when_cut(self):
        s = "x" * 40
        for limit in range(0, 40):
            self.assertEqual(len(truncate(s, limit)), limit)


class TestWideText(unittest.TestCase):
    def test_display_width(self):
        self.assertEqual(display_width("eth0"), 4)
        self.assertEqual(display_width("进程"), 4)
        # combining acute accent takes no column
        self.assertEqual(display_width("e\u0301"), 1)

    def test_truncate_counts_columns(self):
        self.assertEqual(truncate("进程名称很长的服务", 10), "进程名...")
        self.assertEqual(truncate("进程", 4), "进程")
        self.assertEqual(truncate("进程", 3), "进")
        for limit in range(0, 20):
            self.assertLessEqual(display_width(truncate("进程名称很长的服务", limit)), limit)

    def test_clip_line_never_splits_a_wide_char(self):
        line = clip_line((Segment("ab", "text"), Segment("网络网络", "dim")), 5)
        self.assertEqual(line, (Segment("ab", "text"), Segment("网", "dim")))

    def test_wide_cell_keeps_next_column_aligned(self):
        record = InterfaceRecord("以太网适配器网络", True, ("10.0.0.1/8",), 0, 0)
        state = DashboardState(tab=Tab.INTERFACES, width=80, height=24,
                               snapshot=Snapshot((), (), (record,)))
        row = render_frame(state)[4]
        self.assertEqual(row[0].text, "以太网适...  ")
        self.assertEqual(display_width(row[0].text), 12 + 1)
        self.assertEqual(row[1].text.strip(), "up")

    def test_wide_rows_never_exceed_width(self):
        c = ConnectionRecord("tcp", "10.0.0.2:40000", "1.1.1.1:443", "ESTABLISHED", 7, "浏览器进程")
        state = DashboardState(width=70, height=24, snapshot=Snapshot((c,), (), ()))
        for line in render_frame(state, "23:59:59"):
            self.assertLessEqual(sum(display_width(s.text) for s in line), 70)


class TestFormatBytes(unittest.TestCase):
    def test_scaling(self):
        self.assertEqual(format_bytes(0), "0 B")
        self.assertEqual(format_bytes(1023), "1023 B")
        self.assertEqual(format_bytes(1024), "1.0 KB")
        self.assertEqual(format_bytes(1536), "1.5 KB")
        self.assertEqual(format_bytes(1048576), "1.0 MB")
        self.assertEqual(format_bytes(5 * 1024 ** 3), "5.0 GB")
        self.assertEqual(format_bytes(1024 ** 4), "1.0 TB")


class TestFrame(unittest.TestCase):
    def test_placeholder_before_first_resize(self):
        frame = render_frame(DashboardState())
        self.assertEqual(frame_text(frame), PLACEHOLDER)

    def test_zero_connections(self):
        state = DashboardState(width=80, height=24, snapshot=EMPTY_SNAPSHOT)
        lines = frame_text(render_frame(state, "12:00:00")).split("\n")
        self.assertEqual(len(lines), FIXED_CHROME_ROWS)
        self.assertTrue(lines[0].startswith(" net-tui "))
        self.assertTrue(lines[0].endswith("12:00:00"))
        self.assertIn("Connections", lines[1])
        self.assertTrue(lines[3].startswith("PROTO"))
        for col in ("LOCAL", "REMOTE", "STATE", "PROCESS"):
            self.assertIn(col, lines[3])
        self.assertEqual(lines[5], "0 connections")
        self.assertEqual(state.cursor, 0)

    def test_connection_row(self):
        c = ConnectionRecord("tcp", "10.0.0.2:51000", "1.1.1.1:443", "ESTABLISHED",
                             42, "a-very-long-process-name")
        state = DashboardState(width=120, height=24, snapshot=Snapshot((c,), (), ()))
        row = frame_text(render_frame(state)).split("\n")[4]
        self.assertTrue(row.startswith("tcp     10.0.0.2:51000        1.1.1.1:443"))
        self.assertIn("ESTABLISHED", row)
        self.assertIn("a-very-long-...", row)
        self.assertNotIn("process-name", row)

    def test_cursor_row_is_highlighted_full_width(self):
        state = DashboardState(tab=Tab.PORTS, width=90, height=24,
                               snapshot=Snapshot((), ports(5), ()))
        state = update(state, KeyEvent(Action.DOWN))
        frame = render_frame(state)
        rows = frame[4:9]
        styles = [{seg.style for seg in line} for line in rows]
        self.assertEqual(styles[1], {"selected"})
        for i in (0, 2, 3, 4):
            self.assertNotIn("selected", styles[i])
        self.assertEqual(sum(len(s.text) for s in rows[1]), 90)

    def test_only_visible_window_is_rendered(self):
        # height 10 -> 3 rows
        state = DashboardState(tab=Tab.PORTS, width=80, height=10,
                               snapshot=Snapshot((), ports(30), ()))
        for _ in range(5):
            state = update(state, KeyEvent(Action.DOWN))
        lines = frame_text(render_frame(state)).split("\n")
        body = lines[4:-3]
        self.assertEqual([r.split()[0] for r in body], ["1003", "1004", "1005"])
        self.assertEqual(lines[-2], "30 listening ports")
        self.assertEqual(len(lines), 10)

    def test_interfaces(self):
        ifcs = (
            InterfaceRecord("eth0", True, ("192.168.1.5/24", "fe80::1/64"), 1048576, 1023),
            InterfaceRecord("wlan0", False, (), 0, 0),
        )
        state = DashboardState(tab=Tab.INTERFACES, width=100, height=24,
                               snapshot=Snapshot((), (), ifcs))
        frame = render_frame(state)
        lines = frame_text(frame).split("\n")
        self.assertTrue(lines[3].startswith("NAME"))
        self.assertIn("192.168.1.5/24", lines[4])
        self.assertNotIn("fe80", lines[4])
        self.assertIn("1.0 MB", lines[4])
        self.assertIn("1023 B", lines[4])
        self.assertIn(" - ", lines[5])
        self.assertEqual(lines[-2], "2 interfaces")
        # second row is not selected, so its state cell keeps its own style
        self.assertIn("state_down", {s.style for s in frame[5]})

    def test_ports_show_dash_for_unknown_pid(self):
        p = PortRecord(22, "tcp", "*", 0, "")
        state = DashboardState(tab=Tab.PORTS, width=80, height=24, snapshot=Snapshot((), (p,), ()))
        row = frame_text(render_frame(state)).split("\n")[4]
        self.assertEqual(row.split(), ["22", "tcp", "*", "-"])

    def test_lines_never_exceed_width(self):
        state = DashboardState(width=20, height=24, snapshot=Snapshot((), ports(3), ()))
        state = update(state, KeyEvent(Action.SELECT_PORTS))
        for line in render_frame(state, "23:59:59"):
            self.assertLessEqual(sum(len(s.text) for s in line), 20)

    def test_active_tab_marked(self):
        state = DashboardState(tab=Tab.PORTS, width=80, height=24)
        tabs = render_frame(state)[1]
        active = [s.text.strip() for s in tabs if s.style == "tab_active"]
        self.assertEqual(active, ["Ports"])


if __name__ == "__main__":
    unittest.main()
