"""Unit tests for payment API routes."""

import unittest
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from khqrshop.api.dependencies import get_payment_service
from khqrshop.api.routers.payments import router
from khqrshop.application.payment.dtos import (
    CheckPaymentResponseDTO,
    GeneratePaymentResponseDTO,
)
from khqrshop.application.payment.use_cases.payment import PaymentService
from khqrshop.codec.khqr import MerchantProfile
from khqrshop.domain.errors import (
    DeepLinkError,
    FieldTooLongError,
    InvalidAmountError,
    MalformedOracleResponseError,
    MissingCredentialsError,
    OracleUnavailableError,
)
from tests.fixtures import FakePaymentSwitch
from tests.fixtures.samples import REFERENCE_MD5, REFERENCE_PAYLOAD


class TestGeneratePaymentRoute(unittest.TestCase):
    """Test cases for KHQR generation."""

    def setUp(self):
        self.app = FastAPI()
        self.app.include_router(router, prefix="/api/v1")

        self.mock_service = AsyncMock()
        self.app.dependency_overrides[get_payment_service] = lambda: self.mock_service

        self.client = TestClient(self.app)
        self.body = {"amount": 10, "billNumber": "ORD-1"}

    def tearDown(self):
        self.app.dependency_overrides.clear()

    def test_generate_success(self):
        self.mock_service.generate_payment.return_value = GeneratePaymentResponseDTO(
            qr_code=REFERENCE_PAYLOAD, md5=REFERENCE_MD5
        )

        response = self.client.post("/api/v1/payments/generate", json=self.body)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"qrCode": REFERENCE_PAYLOAD, "md5": REFERENCE_MD5, "deepLink": None},
        )
        dto = self.mock_service.generate_payment.call_args.args[0]
        self.assertEqual(dto.bill_number, "ORD-1")
        self.assertFalse(dto.is_mobile)

    def test_generate_mobile_returns_deep_link(self):
        self.mock_service.generate_payment.return_value = GeneratePaymentResponseDTO(
            qr_code=REFERENCE_PAYLOAD,
            md5=REFERENCE_MD5,
            deep_link="https://bakong.page.link/abc",
        )

        response = self.client.post(
            "/api/v1/payments/generate", json={**self.body, "isMobile": True}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["deepLink"], "https://bakong.page.link/abc")
        self.assertTrue(self.mock_service.generate_payment.call_args.args[0].is_mobile)

    def test_generate_invalid_amount(self):
        self.mock_service.generate_payment.side_effect = InvalidAmountError(
            "Payment amount must be positive, got Decimal('0')"
        )

        response = self.client.post(
            "/api/v1/payments/generate", json={**self.body, "amount": 0}
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("must be positive", response.json()["detail"])

    def test_generate_field_too_long(self):
        self.mock_service.generate_payment.side_effect = FieldTooLongError(
            "bill_reference", 30, 25
        )

        response = self.client.post("/api/v1/payments/generate", json=self.body)

        self.assertEqual(response.status_code, 400)
        self.assertIn("bill_reference", response.json()["detail"])

    def test_generate_missing_credentials(self):
        self.mock_service.generate_payment.side_effect = MissingCredentialsError(
            "Merchant account id is not configured"
        )

        response = self.client.post("/api/v1/payments/generate", json=self.body)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json()["detail"],
            "Bakong API credentials are not configured on the server.",
        )

    def test_generate_deep_link_failure(self):
        self.mock_service.generate_payment.side_effect = DeepLinkError("Invalid QR")

        response = self.client.post(
            "/api/v1/payments/generate", json={**self.body, "isMobile": True}
        )

        self.assertEqual(response.status_code, 502)
        self.assertEqual(
            response.json()["detail"], "Error communicating with Bakong API: Invalid QR"
        )

    def test_generate_upstream_unavailable(self):
        self.mock_service.generate_payment.side_effect = OracleUnavailableError(
            "timeout"
        )

        response = self.client.post(
            "/api/v1/payments/generate", json={**self.body, "isMobile": True}
        )

        self.assertEqual(response.status_code, 502)

    def test_generate_requires_bill_number(self):
        response = self.client.post("/api/v1/payments/generate", json={"amount": 1})

        self.assertEqual(response.status_code, 422)
        self.mock_service.generate_payment.assert_not_called()


class TestCheckPaymentRoute(unittest.TestCase):
    """Test cases for settlement checks."""

    def setUp(self):
        self.app = FastAPI()
        self.app.include_router(router, prefix="/api/v1")

        self.mock_service = AsyncMock()
        self.app.dependency_overrides[get_payment_service] = lambda: self.mock_service

        self.client = TestClient(self.app)

    def tearDown(self):
        self.app.dependency_overrides.clear()

    def test_check_paid(self):
        self.mock_service.check_payment.return_value = CheckPaymentResponseDTO(
            status="PAID"
        )

        response = self.client.post(
            "/api/v1/payments/check", json={"md5": REFERENCE_MD5}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "PAID"})

    def test_check_unpaid(self):
        self.mock_service.check_payment.return_value = CheckPaymentResponseDTO(
            status="UNPAID"
        )

        response = self.client.post(
            "/api/v1/payments/check", json={"md5": REFERENCE_MD5}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "UNPAID"})

    def test_check_rejects_bad_md5(self):
        response = self.client.post("/api/v1/payments/check", json={"md5": "xyz"})

        self.assertEqual(response.status_code, 422)
        self.mock_service.check_payment.assert_not_called()

    def test_check_missing_token(self):
        self.mock_service.check_payment.side_effect = MissingCredentialsError(
            "Bakong API token is not configured"
        )

        response = self.client.post(
            "/api/v1/payments/check", json={"md5": REFERENCE_MD5}
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json()["detail"], "Bakong API token is not configured."
        )

    def test_check_malformed_upstream(self):
        self.mock_service.check_payment.side_effect = MalformedOracleResponseError(
            "not json"
        )

        response = self.client.post(
            "/api/v1/payments/check", json={"md5": REFERENCE_MD5}
        )

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "Failed to check payment status.")

    def test_check_upstream_unavailable(self):
        self.mock_service.check_payment.side_effect = OracleUnavailableError("down")

        response = self.client.post(
            "/api/v1/payments/check", json={"md5": REFERENCE_MD5}
        )

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"], "Failed to check payment status.")


class TestGeneratePaymentWithCodec(unittest.TestCase):
    """Generation through the real codec, with only the payment switch faked."""

    def setUp(self):
        self.app = FastAPI()
        self.app.include_router(router, prefix="/api/v1")

        self.switch = FakePaymentSwitch()
        service = PaymentService(
            merchant=MerchantProfile("shop@acledabank", "Angkor Shop"),
            payment_switch_factory=lambda: self.switch,
        )
        self.app.dependency_overrides[get_payment_service] = lambda: service

        self.client = TestClient(self.app)

    def tearDown(self):
        self.app.dependency_overrides.clear()

    def test_reference_code(self):
        response = self.client.post(
            "/api/v1/payments/generate", json={"amount": 10, "billNumber": "ORD-1"}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["qrCode"], REFERENCE_PAYLOAD)

    def test_oversized_amount_is_client_error(self):
        response = self.client.post(
            "/api/v1/payments/generate", json={"amount": 1e30, "billNumber": "ORD-1"}
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("too large", response.json()["detail"])
        self.assertEqual(self.switch.calls, [])


if __name__ == "__main__":
    unittest.main()
