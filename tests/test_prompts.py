"""Unit tests for interactive prompts (fastify_starter.prompts)."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from fastify_starter.config import merge_options
from fastify_starter.prompts import DEFAULT_PROJECT_NAME, ask_option, ask_project_name


class TestAskProjectName:
    @pytest.mark.unit
    def test_reasks_until_valid(self):
        with patch("fastify_starter.prompts.Prompt.ask", side_effect=["Bad Name", "good-name"]) as ask:
            assert ask_project_name() == "good-name"
        assert ask.call_count == 2
        assert ask.call_args.kwargs["default"] == DEFAULT_PROJECT_NAME


class TestAskOption:
    @pytest.mark.unit
    def test_choice_question(self):
        with patch("fastify_starter.prompts.Prompt.ask", return_value="postgres") as ask:
            assert ask_option("database", "sqlite") == "postgres"
        assert ask.call_args.kwargs["choices"] == ["sqlite", "postgres", "mysql"]
        assert ask.call_args.kwargs["default"] == "sqlite"

    @pytest.mark.unit
    def test_confirm_question(self):
        with patch("fastify_starter.prompts.Confirm.ask", return_value=False) as ask:
            assert ask_option("init_git", True) is False
        assert ask.call_args.kwargs["default"] is True

    @pytest.mark.unit
    def test_unknown_field_keeps_default(self):
        assert ask_option("something-else", "x") == "x"

    @pytest.mark.unit
    def test_drives_merge_options(self):
        with patch("fastify_starter.prompts.Prompt.ask", side_effect=lambda question, **kw: kw["default"]), \
             patch("fastify_starter.prompts.Confirm.ask", return_value=False):
            merged = merge_options({"linter": "eslint"}, ask_option)

        assert merged == {
            "database": "sqlite",
            "orm": "prisma",
            "linter": "eslint",
            "install_dependencies": False,
            "init_git": False,
        }
