"""Tests for account commands."""

from decimal import Decimal

import pytest

from assetbook.cli.commands.account import parse_share
from assetbook.cli.main import cli
from assetbook.domain.errors import InvalidPercentage


def test_account_create_path(cli_runner, temp_db, alice):
    """Test that missing parents are created as categories."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "account", "create", "Assets:Bank:Checking", "--subtype", "checking"],
    )

    assert result.exit_code == 0
    assert "Created account 'Assets:Bank:Checking'" in result.output
    assert "ID:" in result.output


def test_account_create_root_with_type(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "create", "Household", "--type", "asset"]
    )

    assert result.exit_code == 0
    assert "Created account 'Household'" in result.output


def test_account_create_uninferable_root(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "create", "Household"])

    assert result.exit_code == 1
    assert "Cannot infer" in result.output


def test_account_create_duplicate(cli_runner, temp_db, sample_accounts):
    """Test creating a duplicate sibling fails."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "create", "Assets:Bank:Checking"]
    )

    assert result.exit_code == 1
    assert "already exists" in result.output.lower()


def test_account_create_bad_subtype(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "create", "Assets:Visa", "--subtype", "credit_card"]
    )

    assert result.exit_code == 1
    assert "not valid" in result.output


def test_account_list_empty(cli_runner, temp_db):
    """Test listing accounts when none exist."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "No accounts found" in result.output


def test_account_list_with_data(cli_runner, temp_db, sample_accounts):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list", "--type", "asset"])

    assert result.exit_code == 0
    assert "Checking" in result.output
    assert "checking" in result.output
    assert "Salary" not in result.output


def test_account_rename(cli_runner, temp_db, sample_accounts):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "rename", "Assets:Bank", "Bank1"]
    )

    assert result.exit_code == 0
    assert "Assets:Bank1" in result.output

    temp_db.disconnect()
    checking = temp_db.get_account(sample_accounts["Assets:Bank:Checking"])
    assert checking.full_path == "Assets:Bank1:Checking"


def test_account_move_by_id(cli_runner, temp_db, sample_accounts):
    bank_id = temp_db.get_account(sample_accounts["Assets:Bank:Checking"]).parent_id
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "move", str(bank_id), "--root"]
    )

    assert result.exit_code == 0
    assert "Moved account to 'Bank'" in result.output


def test_account_move_needs_one_target(cli_runner, temp_db, sample_accounts):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "move", "Assets:Bank", "Assets", "--root"]
    )

    assert result.exit_code == 1
    assert "either NEW_PARENT or --root" in result.output


def test_account_move_under_descendant(cli_runner, temp_db, sample_accounts):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "move", "Assets:Bank", "Assets:Bank:Checking"]
    )

    assert result.exit_code == 1
    assert "descendant" in result.output


def test_account_deactivate_blocked(cli_runner, temp_db, sample_accounts):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "deactivate", "Assets:Bank"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_account_deactivate_and_reactivate(cli_runner, temp_db, sample_accounts):
    base = ["--db-path", temp_db.database_path, "account"]

    assert cli_runner.invoke(cli, base + ["deactivate", "Liabilities:Visa"]).exit_code == 0
    listing = cli_runner.invoke(cli, base + ["list", "--all"])
    assert "Visa" in listing.output
    assert "(inactive)" in listing.output

    assert cli_runner.invoke(cli, base + ["reactivate", "Liabilities:Visa"]).exit_code == 0


def test_account_unknown(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "ownership", "Assets:Nope"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_account_ownership_commands(cli_runner, temp_db, sample_accounts, alice, bob):
    base = ["--db-path", temp_db.database_path, "account"]

    over = cli_runner.invoke(cli, base + ["set-owner", "Assets:Bank:Savings", "bob", "50%"])
    assert over.exit_code == 1
    assert "exceed" in over.output

    assert cli_runner.invoke(cli, base + ["set-owner", "Assets:Bank:Savings", "alice", "0.5"]).exit_code == 0
    result = cli_runner.invoke(cli, base + ["set-owner", "Assets:Bank:Savings", "bob", "50%"])
    assert result.exit_code == 0
    assert "bob now owns 50.00%" in result.output

    shown = cli_runner.invoke(cli, base + ["ownership", "Assets:Bank:Savings"])
    assert "alice" in shown.output
    assert "bob" in shown.output
    assert "100.00%" in shown.output

    removed = cli_runner.invoke(cli, base + ["remove-owner", "Assets:Bank:Savings", "bob"])
    assert "Removed bob" in removed.output


def test_set_owner_unknown_user(cli_runner, temp_db, sample_accounts):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "set-owner", "Assets:Bank:Savings", "carol", "10%"]
    )

    assert result.exit_code == 1
    assert "User 'carol' not found" in result.output


@pytest.mark.parametrize("text, expected", [("60%", Decimal("0.6")), ("0.25", Decimal("0.25")), (" 100 % ", Decimal("1"))])
def test_parse_share(text, expected):
    assert parse_share(text) == expected


@pytest.mark.parametrize("text", ["abc", "150%", "0"])
def test_parse_share_invalid(text):
    with pytest.raises(InvalidPercentage):
        parse_share(text)
