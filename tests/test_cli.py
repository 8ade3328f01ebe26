"""Tests for the command-line interface."""

import pytest
import os
from pathlib import Path
from unittest.mock import patch

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from gazette_pkg import __version__
from gazette_pkg.cli import build_parser, create_starter_structure, main


class TestParser:
    """Test cases for argument parsing."""

    def test_defaults(self):
        """Test that unset options stay None so config values apply."""
        args = build_parser().parse_args([])
        assert args.source is None
        assert args.destination is None
        assert args.include_drafts is None
        assert args.verbose is False
        assert args.init is None

    def test_short_options(self):
        """Test the short option aliases."""
        args = build_parser().parse_args(['-s', 'src', '-d', 'out', '-c', 'conf.yml', '-v', '--drafts'])
        assert (args.source, args.destination, args.config) == ('src', 'out', 'conf.yml')
        assert args.verbose is True
        assert args.include_drafts is True

    def test_version(self, capsys):
        """Test --version."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(['--version'])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestMain:
    """Test cases for the main entry point."""

    def test_build(self, site_dir, temp_dir):
        """Test a build driven from the command line."""
        out = os.path.join(temp_dir, 'out')
        main(['--source', site_dir, '--destination', out])
        assert (Path(out) / 'index.html').exists()
        assert (Path(out) / 'blog' / '2023' / 'first-post' / 'index.html').exists()
        assert not (Path(out) / 'blog' / '2024' / 'upcoming').exists()

    def test_build_with_drafts(self, site_dir, temp_dir):
        """Test --drafts."""
        out = os.path.join(temp_dir, 'out')
        main(['--source', site_dir, '--destination', out, '--drafts'])
        assert (Path(out) / 'blog' / '2024' / 'upcoming' / 'index.html').exists()

    def test_options_reach_the_builder(self, site_dir, temp_dir):
        """Test that logging options are passed through."""
        log_dir = os.path.join(temp_dir, 'logs')
        with patch('gazette_pkg.cli.Gazette') as mock_gazette:
            main(['--source', site_dir, '--verbose', '--log-dir', log_dir])
        config = mock_gazette.call_args[0][0]
        assert config.source == site_dir
        assert mock_gazette.call_args[1] == {'verbose': True, 'log_dir': log_dir}
        mock_gazette.return_value.build.assert_called_once()

    def test_error_exit(self, temp_dir, capsys):
        """Test that failures print an error and exit non-zero."""
        Path(temp_dir, '_gazette.yml').write_text("colour: blue\n")
        with pytest.raises(SystemExit) as exc_info:
            main(['--source', temp_dir])
        assert exc_info.value.code == 1
        assert 'Error:' in capsys.readouterr().err

    def test_content_error_exit(self, site_dir, temp_dir, capsys):
        """Test that a bad document fails the whole build."""
        Path(site_dir, 'posts', 'bad.md').write_text("---\npermalink: pretty\n---\n")
        with pytest.raises(SystemExit) as exc_info:
            main(['--source', site_dir, '--destination', os.path.join(temp_dir, 'out')])
        assert exc_info.value.code == 1
        assert 'pretty' in capsys.readouterr().err

    def test_init_creates_a_buildable_site(self, temp_dir, monkeypatch):
        """Test --init followed by a build with defaults."""
        monkeypatch.chdir(temp_dir)
        main(['--init', 'yml'])
        for rel_path in ('_gazette.yml', '_layouts/default.html', 'index.html',
                         'posts/2025-01-01-welcome-to-gazette.md'):
            assert (Path(temp_dir) / rel_path).exists()

        main([])
        site = Path(temp_dir) / '_site'
        assert 'Welcome to Gazette' in (site / 'index.html').read_text()
        assert (site / '2025' / '01' / 'welcome-to-gazette' / 'index.html').exists()
        assert (site / 'rss.xml').exists()

    def test_init_json(self, temp_dir):
        """Test --init with a JSON config in the source directory."""
        main(['--init', 'json', '--source', temp_dir])
        assert (Path(temp_dir) / '_gazette.json').exists()


class TestStarterStructure:
    """Test cases for the starter files."""

    def test_existing_files_are_kept(self, temp_dir, capsys):
        """Test that starter files never overwrite."""
        Path(temp_dir, 'index.html').write_text('mine')
        created = create_starter_structure(temp_dir)
        assert Path(temp_dir, 'index.html').read_text() == 'mine'
        assert len(created) == 2
        assert 'File already exists: index.html' in capsys.readouterr().out
