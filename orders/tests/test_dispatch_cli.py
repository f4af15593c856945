"""
Unit Tests for the Shipping Desk CLI

Run with: pytest orders/tests/ -v
"""

import pytest

from orders.scripts.dispatch import build_parser, cmd_dispatch, cmd_new
from orders.models import AlreadyDispatchedError
from orders.shipping import ShippingDesk
from orders.store import LocalOrderStore


class UnsavedStore(LocalOrderStore):
    """Store whose writes fail the way TableOrderStore reports them."""

    def upsert(self, order):
        return None


def _args(*argv):
    return build_parser().parse_args(list(argv))


class TestNew:

    def test_created(self, store, capsys):
        desk = ShippingDesk(store)
        cmd_new(desk, _args("new", "--name", "Mona", "--phone", "0100", "--city", "Cairo", "--total", "500"))

        out = capsys.readouterr().out
        assert out.startswith("Created ORD-")
        assert len(store.list()) == 1

    def test_failed_write_reported(self, tmp_path, capsys):
        desk = ShippingDesk(UnsavedStore(tmp_path / "orders.parquet"))
        with pytest.raises(SystemExit):
            cmd_new(desk, _args("new", "--name", "Mona", "--phone", "0100", "--city", "Cairo"))

        out = capsys.readouterr().out
        assert "NOT saved" in out
        assert "Created" not in out


class TestDispatch:

    def test_second_dispatch_needs_force(self, store, make_order, capsys):
        store.upsert(make_order("ORD-1"))
        desk = ShippingDesk(store)
        cmd_dispatch(desk, _args("dispatch", "ORD-1", "--company", "JT", "--weight", "3"))

        with pytest.raises(AlreadyDispatchedError):
            cmd_dispatch(desk, _args("dispatch", "ORD-1", "--company", "POSTA", "--net-fee", "30"))

        cmd_dispatch(desk, _args("dispatch", "ORD-1", "--company", "POSTA", "--net-fee", "30", "--force"))
        assert store.get("ORD-1").shipping_fee == pytest.approx(30.0)
