"""
httpdconf Pipeline Tests
Input handler, line assembler, include expander and scope filter.
"""

import os
import logging
import pytest

from core.defines import DefineResolver
from core.include_expander import CyclicIncludeError, IncludeExpander
from core.input_handler import InputHandler
from core.line_assembler import LineAssembler
from core.models import ConfigurationLine, Define, SharedModule, StaticModule
from core.scope_filter import ScopeFilter


MODULES = [StaticModule("core_module"), SharedModule("ssl_module"), SharedModule("log_config_module")]


def make_line(text, source_file="/etc/httpd/conf/httpd.conf", line_num=1):
    return ConfigurationLine(
        raw_text=text,
        processed_text=LineAssembler().process_line(text),
        source_file=source_file,
        is_comment=text.strip().startswith("#"),
        start_line=line_num,
        end_line=line_num,
    )


def make_lines(texts):
    return [make_line(text, line_num=i) for i, text in enumerate(texts, start=1)]


class TestInputHandler:
    """Tests for the file system layer."""

    def test_read_physical_lines(self, make_tree):
        root = make_tree({"a.conf": "Listen 80\r\nServerName x\n"})
        lines = InputHandler().read_physical_lines(os.path.join(root, "a.conf"))
        assert lines == ["Listen 80", "ServerName x"]

    def test_read_empty_file(self, make_tree):
        root = make_tree({"empty.conf": ""})
        assert InputHandler().read_physical_lines(os.path.join(root, "empty.conf")) == []

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            InputHandler().read_physical_lines("/nonexistent/path/httpd.conf")

    def test_binary_file_rejected(self, tmp_path):
        path = tmp_path / "blob.conf"
        path.write_bytes(b"\xff\xfe\x00binary")
        with pytest.raises(ValueError):
            InputHandler().read_physical_lines(str(path))

    def test_size_limit(self, make_tree):
        root = make_tree({"big.conf": "x" * 100})
        with pytest.raises(ValueError):
            InputHandler(max_file_size=10).read_physical_lines(os.path.join(root, "big.conf"))

    def test_resolve_include_path(self):
        assert InputHandler.resolve_include_path("conf.d/a.conf", "/etc/httpd") == "/etc/httpd/conf.d/a.conf"
        assert InputHandler.resolve_include_path("/opt/a.conf", "/etc/httpd") == "/opt/a.conf"

    def test_drive_style_target_is_kept(self):
        target = "C:/Apache/conf/x.conf"
        assert InputHandler.resolve_include_path(target, "/etc/httpd") == target

    def test_wildcard_escapes_dots(self, make_tree):
        root = make_tree({"d/a.conf": "", "d/b.conf": "", "d/aXconf": "", "d/c.txt": ""})
        files = InputHandler().list_included_files(os.path.join(root, "d", "*.conf"))
        assert [os.path.basename(f) for f in files] == ["a.conf", "b.conf"]

    def test_directory_skips_subdirectories(self, make_tree):
        root = make_tree({"d/b.conf": "", "d/a.conf": "", "d/sub/c.conf": ""})
        files = InputHandler().list_included_files(os.path.join(root, "d"))
        assert [os.path.basename(f) for f in files] == ["a.conf", "b.conf"]

    def test_wildcard_in_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            InputHandler().list_included_files(str(tmp_path / "missing" / "*.conf"))


class TestLineAssembler:
    """Tests for Module 3 - Line Assembler."""

    def test_single_lines(self):
        lines = list(LineAssembler().assemble("/x.conf", ["Listen 80", "", "# note"]))
        assert len(lines) == 3
        assert [(l.start_line, l.end_line) for l in lines] == [(1, 1), (2, 2), (3, 3)]
        assert lines[2].is_comment
        assert not lines[0].is_comment

    def test_continuation_joins_with_single_space(self):
        physical = ["ServerAdmin a@example.com \\", "    b@example.com"]
        lines = list(LineAssembler().assemble("/x.conf", physical))
        assert len(lines) == 1
        line = lines[0]
        assert line.processed_text == "ServerAdmin a@example.com b@example.com"
        assert "\\" not in line.processed_text
        assert line.raw_text == "ServerAdmin a@example.com \\\n    b@example.com"

    def test_continuation_span(self):
        physical = ["Listen 80", "Options \\", "  Indexes \\", "  FollowSymLinks", "Listen 443"]
        lines = list(LineAssembler().assemble("/x.conf", physical))
        assert len(lines) == 3
        joined = lines[1]
        assert (joined.start_line, joined.end_line) == (2, 4)
        assert joined.line_count == 3
        assert joined.processed_text == "Options Indexes FollowSymLinks"
        assert (lines[2].start_line, lines[2].end_line) == (5, 5)

    def test_dangling_continuation_at_end_of_file(self):
        lines = list(LineAssembler().assemble("/x.conf", ["Listen 80", "Options \\"]))
        assert len(lines) == 2
        assert lines[1].processed_text == "Options"
        assert (lines[1].start_line, lines[1].end_line) == (2, 2)

    def test_whitespace_is_collapsed(self):
        assert LineAssembler().process_line("  Listen\t\t 80   ") == "Listen 80"

    def test_defines_are_substituted(self):
        assembler = LineAssembler([Define("ROOT", "/srv/www")], DefineResolver.substitute)
        assert assembler.process_line('DocumentRoot "${ROOT}/html"') == 'DocumentRoot "/srv/www/html"'

    def test_commented_out_continuation(self):
        lines = list(LineAssembler().assemble("/x.conf", ["#Options \\", "Indexes"]))
        assert len(lines) == 1
        assert lines[0].is_comment


class TestIncludeExpander:
    """Tests for Module 4 - Include Expander."""

    def test_include_spliced_in_place(self, make_tree):
        root = make_tree({
            "httpd.conf": "Listen 80\nInclude extra.conf\nListen 443\n",
            "extra.conf": "ServerName a\nServerName b\n",
        })
        lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert [l.processed_text for l in lines] == [
            "Listen 80", "Include extra.conf", "ServerName a", "ServerName b", "Listen 443",
        ]
        assert lines[2].source_file == os.path.join(root, "extra.conf")
        assert lines[2].start_line == 1

    def test_directory_and_glob_order(self, make_tree):
        root = make_tree({
            "httpd.conf": "Include conf.d\nInclude sites/*.conf\n",
            "conf.d/20-b.conf": "B",
            "conf.d/10-a.conf": "A",
            "sites/z.conf": "Z",
            "sites/m.conf": "M",
            "sites/m.conf.bak": "BAK",
        })
        expander = IncludeExpander(root, MODULES)
        first = [l.processed_text for l in expander.expand(os.path.join(root, "httpd.conf"))]
        second = [l.processed_text for l in expander.expand(os.path.join(root, "httpd.conf"))]
        assert first == ["Include conf.d", "A", "B", "Include sites/*.conf", "M", "Z"]
        assert first == second

    def test_include_absolute_path_and_quotes(self, make_tree):
        root = make_tree({"other/x.conf": "X"})
        target = os.path.join(root, "other", "x.conf")
        root = make_tree({"httpd.conf": f'Include "{target}"\n'})
        lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert lines[-1].source_file == target

    def test_negated_guard_on_absent_module_expands(self, make_tree):
        root = make_tree({
            "httpd.conf": "<IfModule !mod_absent.c>\nInclude other.conf\n</IfModule>\n",
            "other.conf": "Listen 8080\n",
        })
        lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert "Listen 8080" in [l.processed_text for l in lines]

    def test_guard_on_absent_module_does_not_expand(self, make_tree):
        root = make_tree({
            "httpd.conf": "<IfModule absent_module>\nInclude missing.conf\n</IfModule>\nListen 80\n",
        })
        lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert len(lines) == 4

    def test_negated_guard_on_loaded_module_does_not_expand(self, make_tree):
        root = make_tree({
            "httpd.conf": "<IfModule !ssl_module>\nInclude missing.conf\n</IfModule>\n",
        })
        lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert len(lines) == 3

    def test_missing_include_aborts(self, make_tree):
        root = make_tree({"httpd.conf": "Include nope.conf\n"})
        with pytest.raises(FileNotFoundError):
            IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))

    def test_commented_include_is_ignored(self, make_tree):
        root = make_tree({"httpd.conf": "# Include nope.conf\n"})
        lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert len(lines) == 1

    def test_cycle_detected(self, make_tree):
        root = make_tree({
            "httpd.conf": "Include a.conf\n",
            "a.conf": "Include b.conf\n",
            "b.conf": "Include a.conf\n",
        })
        with pytest.raises(CyclicIncludeError) as excinfo:
            IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert [os.path.basename(p) for p in excinfo.value.chain] == [
            "httpd.conf", "a.conf", "b.conf", "a.conf",
        ]

    def test_repeated_sibling_include_is_not_a_cycle(self, make_tree):
        root = make_tree({
            "httpd.conf": "Include a.conf\nInclude a.conf\n",
            "a.conf": "A\n",
        })
        lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert [l.processed_text for l in lines].count("A") == 2

    def test_unresolved_variable_is_skipped(self, make_tree):
        root = make_tree({"httpd.conf": "Include ${CONF}/x.conf\nListen 80\n"})
        lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert len(lines) == 2

    def test_glob_matching_nothing_warns(self, make_tree, caplog):
        root = make_tree({"httpd.conf": "Include conf.d/*.conf\nListen 80\n", "conf.d/readme.txt": "x"})
        with caplog.at_level(logging.WARNING, logger="httpdconf"):
            lines = IncludeExpander(root, MODULES).expand(os.path.join(root, "httpd.conf"))
        assert [l.processed_text for l in lines] == ["Include conf.d/*.conf", "Listen 80"]
        assert "matched no files" in caplog.text


class TestScopeFilter:
    """Tests for Module 5 - Scope Filter."""

    def test_never_drops_lines(self):
        lines = make_lines(["<IfModule absent_module>", "Listen 1", "</IfModule>", "Listen 2"])
        parsable = ScopeFilter(MODULES).filter(lines)
        assert len(parsable) == len(lines)
        assert [p.configuration_line for p in parsable] == lines

    def test_false_guard_suppresses_including_tags(self):
        lines = make_lines(["<IfModule absent_module>", "Listen 1", "</IfModule>", "Listen 2"])
        parsable = ScopeFilter(MODULES).filter(lines)
        assert [p.active for p in parsable] == [False, False, False, True]

    def test_true_guard_keeps_lines_active(self):
        lines = make_lines(["<IfModule ssl_module>", "Listen 443", "</IfModule>"])
        assert all(p.active for p in ScopeFilter(MODULES).filter(lines))

    def test_module_spellings_agree(self):
        by_source = make_lines(["<IfModule mod_ssl.c>", "Listen 443", "</IfModule>"])
        by_name = make_lines(["<IfModule ssl_module>", "Listen 443", "</IfModule>"])
        scope_filter = ScopeFilter(MODULES)
        assert [p.active for p in scope_filter.filter(by_source)] == \
            [p.active for p in scope_filter.filter(by_name)]

    def test_nested_guards_inside_false_guard(self):
        lines = make_lines([
            "<IfModule absent_module>",
            "<IfModule ssl_module>",
            "Listen 443",
            "</IfModule>",
            "Listen 1",
            "</IfModule>",
            "Listen 2",
        ])
        parsable = ScopeFilter(MODULES).filter(lines)
        assert [p.active for p in parsable] == [False] * 6 + [True]

    def test_comments_follow_enclosing_scope(self):
        lines = make_lines(["<IfModule absent_module>", "# </IfModule>", "Listen 1", "</IfModule>", "# after"])
        parsable = ScopeFilter(MODULES).filter(lines)
        assert [p.active for p in parsable] == [False, False, False, False, True]

    def test_virtual_hosts_excluded_on_request(self):
        lines = make_lines(["Listen 80", "<VirtualHost *:80>", "ServerName a", "</VirtualHost>", "Listen 443"])
        included = ScopeFilter(MODULES).filter(lines, include_vhosts=True)
        excluded = ScopeFilter(MODULES).filter(lines, include_vhosts=False)
        assert all(p.active for p in included)
        assert [p.active for p in excluded] == [True, False, False, False, True]

    def test_virtual_host_inside_false_guard_stays_balanced(self):
        lines = make_lines([
            "<IfModule absent_module>",
            "<VirtualHost *:80>",
            "</VirtualHost>",
            "</IfModule>",
            "Listen 80",
        ])
        parsable = ScopeFilter(MODULES).filter(lines, include_vhosts=False)
        assert parsable[-1].active

    def test_each_call_starts_from_empty_state(self):
        scope_filter = ScopeFilter(MODULES)
        scope_filter.filter(make_lines(["<IfModule absent_module>", "Listen 1"]))
        parsable = scope_filter.filter(make_lines(["Listen 2"]))
        assert parsable[0].active
