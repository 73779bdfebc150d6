"""Unit tests for AppError subclasses and the ApiResponse envelope."""

from src.pm_common.errors import (
    AlreadyClaimedError,
    AppError,
    InsufficientBalanceError,
    InsufficientPaymentError,
    InvalidAmountError,
    MarketClosedError,
    NoFeesError,
    ReentrantCallError,
    ScoreUnavailableError,
    TooEarlyError,
    UnauthorizedError,
)
from src.pm_common.response import error_response, success_response


class TestErrorCodes:
    def test_all_subclass_app_error(self) -> None:
        for err in (
            InvalidAmountError(0),
            MarketClosedError("m"),
            ScoreUnavailableError("m"),
            NoFeesError("m"),
        ):
            assert isinstance(err, AppError)

    def test_code_ranges_by_domain(self) -> None:
        assert UnauthorizedError("bob", "mint").code // 1000 == 1
        assert InsufficientBalanceError("bob", 2, 1).code // 1000 == 2
        assert TooEarlyError("m", 10).code // 1000 == 3
        assert InsufficientPaymentError(2, 1).code // 1000 == 4
        assert AlreadyClaimedError("bob").code // 1000 == 5
        assert ScoreUnavailableError("m").code // 1000 == 6

    def test_http_status(self) -> None:
        assert UnauthorizedError("bob", "mint").http_status == 403
        assert ReentrantCallError("m").http_status == 409
        assert InvalidAmountError(0).http_status == 422

    def test_message_carries_context(self) -> None:
        err = InsufficientPaymentError(required=105, paid=100)
        assert "105" in err.message
        assert "100" in err.message
        assert str(err) == err.message


class TestApiResponse:
    def test_success_envelope(self) -> None:
        resp = success_response({"x": 1})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"x": 1}
        assert resp.request_id.startswith("req_")

    def test_error_envelope(self) -> None:
        resp = error_response(4001, "bad")
        assert resp.code == 4001
        assert resp.data is None
