"""E2E tests for many payments submitted at once."""

import threading

import pytest
import requests


pytestmark = pytest.mark.e2e


class TestConcurrentPayments:
    def test_parallel_payments_each_get_their_own_record(self, gateway, request_factory):
        results = []
        lock = threading.Lock()

        def submit(card_number):
            resp = requests.post(
                f"{gateway.url}/api/payments",
                json=request_factory.create_payload(card_number=card_number),
                timeout=10,
            )
            with lock:
                results.append((card_number, resp.status_code, resp.json()))

        cards = [f"123456789012345{d}" for d in "123456789"] * 3
        threads = [threading.Thread(target=submit, args=(card,)) for card in cards]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == len(cards)
        assert all(code == 200 for _, code, _ in results)
        ids = {body["id"] for _, _, body in results}
        assert len(ids) == len(cards)
        for card_number, _, body in results:
            expected = "Authorized" if int(card_number[-1]) % 2 else "Declined"
            assert body["status"] == expected
            assert body["last_four_card_digits"] == card_number[-4:]

        for _, _, body in results:
            fetched = requests.get(f"{gateway.url}/api/payments/{body['id']}", timeout=10).json()
            assert fetched == body
