"""Transaction Schemas — coin and buy-line validation at the API boundary."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from vending.schemas.transaction import BuyRequest, DepositRequest


def test_deposit_accepts_allowed_coins():
    assert DepositRequest(coins=[5, 10, 20, 50, 100]).coins == [5, 10, 20, 50, 100]


def test_deposit_rejects_unknown_denomination():
    with pytest.raises(ValidationError) as exc_info:
        DepositRequest(coins=[5, 1])
    assert "Invalid coin denominations: 1" in str(exc_info.value)


def test_deposit_rejects_empty_list():
    with pytest.raises(ValidationError):
        DepositRequest(coins=[])


def test_buy_request_requires_positive_amount():
    with pytest.raises(ValidationError):
        BuyRequest(product_id=uuid4(), amount=0)


def test_buy_request_parses_uuid_string():
    pid = uuid4()
    assert BuyRequest(product_id=str(pid), amount=2).product_id == pid


def test_buy_request_rejects_amount_beyond_32_bit_column():
    with pytest.raises(ValidationError):
        BuyRequest(product_id=uuid4(), amount=2**31)


def test_deposit_caps_coins_per_request():
    assert len(DepositRequest(coins=[100] * 1000).coins) == 1000
    with pytest.raises(ValidationError):
        DepositRequest(coins=[100] * 1001)
