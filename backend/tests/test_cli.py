"""
CLI command tests.

Verifies:
- inventory low-stock prints quantities without padded decimals
- reports show prints the report table
"""

from estatebooks.services import inventory_service


class TestLowStock:

    def test_lists_low_items(self, app, sql_store):
        inventory_service.create_item(sql_store, name="Cement", unit="ton", quantity="0", min_quantity="100")
        inventory_service.create_item(sql_store, name="Sand", unit="m3", quantity="2.5", min_quantity="1")

        result = app.test_cli_runner().invoke(args=["inventory", "low-stock"])

        assert result.exit_code == 0
        assert "LOW  Cement: 0 ton (min 100)" in result.output
        assert "Sand" not in result.output

    def test_nothing_low(self, app, sql_store):
        result = app.test_cli_runner().invoke(args=["inventory", "low-stock"])
        assert "PASS No items below minimum stock." in result.output


class TestShowReport:

    def test_inventory_report(self, app, sql_store):
        inventory_service.create_item(sql_store, name="Steel", unit="kg", quantity="12.5", min_quantity="1")

        result = app.test_cli_runner().invoke(args=["reports", "show", "inventory"])

        assert result.exit_code == 0
        assert "Steel | 12.5 kg | 1 | ok" in result.output

    def test_bad_range(self, app, sql_store):
        result = app.test_cli_runner().invoke(
            args=["reports", "show", "revenue", "--from", "2025-02-01", "--to", "2025-01-01"],
        )
        assert result.exit_code != 0
