import pytest

from app.core.exceptions import OrderValidationError, ShippingNotFoundError, ShippingValidationError
from app.schemas.checkout import CheckoutAddress, CheckoutRequest, DeliveryType, LocalityType
from app.services.checkout_service import (
    NO_NUMBER,
    PICKUP_RULE,
    apply_server_shipping,
    validate_delivery_address,
)
from app.services.shipping.engine import ShippingQuoteEngine
from app.services.shipping.product_rules import ProductShippingRule

BH_ADDRESS = dict(
    postal_code="30130-010",
    street="Av. Afonso Pena",
    number="1000",
    district="Centro",
    city="Belo Horizonte",
    state="mg",
)


class TestValidateDeliveryAddress:

    def test_normalizes_postal_code_and_state(self):
        address = validate_delivery_address(CheckoutAddress(**BH_ADDRESS))
        assert address.postal_code == "30130010"
        assert address.state == "MG"

    def test_reports_all_missing_fields(self):
        with pytest.raises(OrderValidationError) as exc_info:
            validate_delivery_address(CheckoutAddress(postal_code="30130010"))
        assert exc_info.value.details["fields"] == ["city", "state", "street", "district", "number"]
        assert exc_info.value.status_code == 400

    def test_no_number_sets_sn(self):
        data = {**BH_ADDRESS, "number": None, "no_number": True}
        address = validate_delivery_address(CheckoutAddress(**data))
        assert address.number == NO_NUMBER

    def test_rural_address_needs_no_street(self):
        address = validate_delivery_address(CheckoutAddress(
            postal_code="35500000", city="Divinópolis", state="MG", locality_type=LocalityType.RURAL,
        ))
        assert address.street is None

    def test_missing_address(self):
        with pytest.raises(OrderValidationError):
            validate_delivery_address(None)

    def test_nine_digit_postal_code_rejected(self):
        data = {**BH_ADDRESS, "postal_code": "30130-0109"}
        with pytest.raises(ShippingValidationError) as exc_info:
            validate_delivery_address(CheckoutAddress(**data))
        assert exc_info.value.details["field"] == "postal_code"
        assert exc_info.value.status_code == 400


class TestApplyServerShipping:
    """Client shipping figures are always replaced."""

    @pytest.mark.asyncio
    async def test_overwrites_client_fields(self, make_store, resolver, bh_zone):
        store = make_store(products=[ProductShippingRule(product_id=1, lead_time_days=3)], zones=[bh_zone])
        engine = ShippingQuoteEngine(store, resolver)
        payload = CheckoutRequest(
            items=[{"id": 1, "quantity": 1}],
            address=CheckoutAddress(**BH_ADDRESS),
            shipping_price=0.01,
            shipping_lead_time_days=0,
            shipping_rule_applied="PRODUCT_FREE",
        )

        result = await apply_server_shipping(payload, engine)

        assert result.shipping_price == 12.0
        assert result.shipping_lead_time_days == 3
        assert result.shipping_rule_applied == "ZONE"
        assert result.address.postal_code == "30130010"
        # Incoming request untouched
        assert payload.shipping_price == 0.01

    @pytest.mark.asyncio
    async def test_pickup_skips_engine(self, make_store, make_resolver):
        resolver = make_resolver({})
        engine = ShippingQuoteEngine(make_store(), resolver)
        payload = CheckoutRequest(
            items=[{"product_id": 1, "qty": 2}],
            delivery_type=DeliveryType.PICKUP,
            shipping_price=30.0,
        )

        result = await apply_server_shipping(payload, engine)

        assert result.shipping_price == 0.0
        assert result.shipping_rule_applied == PICKUP_RULE
        assert result.shipping_lead_time_days is None
        assert resolver.lookups == []

    @pytest.mark.asyncio
    async def test_engine_errors_propagate(self, make_store, resolver):
        engine = ShippingQuoteEngine(make_store(products=[ProductShippingRule(product_id=1)]), resolver)
        payload = CheckoutRequest(items=[{"id": 1, "quantity": 1}], address=CheckoutAddress(**BH_ADDRESS))

        with pytest.raises(ShippingNotFoundError):
            await apply_server_shipping(payload, engine)

    @pytest.mark.asyncio
    async def test_long_postal_code_never_reaches_engine(self, make_store, resolver, bh_zone):
        store = make_store(products=[ProductShippingRule(product_id=1)], zones=[bh_zone])
        engine = ShippingQuoteEngine(store, resolver)
        payload = CheckoutRequest(
            items=[{"id": 1, "quantity": 1}],
            address=CheckoutAddress(**{**BH_ADDRESS, "postal_code": "30130-0109"}),
        )

        with pytest.raises(ShippingValidationError):
            await apply_server_shipping(payload, engine)
        assert resolver.lookups == []
        assert store.calls == []
