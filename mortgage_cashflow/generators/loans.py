"""Synthetic loan batch generator."""

from __future__ import annotations

from typing import Iterator

from mortgage_cashflow.generators.base import BaseGenerator
from mortgage_cashflow.models.loan import LoanInfo


class LoanBatchGenerator(BaseGenerator):
    """Generate loan descriptors for demos and load tests."""

    TERMS = [120, 180, 240, 300, 360]
    TERM_WEIGHTS = [0.05, 0.20, 0.05, 0.05, 0.65]

    def __init__(self, seed: int | None = None, static_dq_share: float = 0.5) -> None:
        super().__init__(seed)
        self.static_dq_share = static_dq_share

    def generate(self) -> LoanInfo:
        """Generate a single random loan.

        Returns
        -------
        LoanInfo
            Loan with a market-like coupon, balance and prepayment speed.
        """
        wam = self.rng.choices(self.TERMS, weights=self.TERM_WEIGHTS, k=1)[0]
        # Seasoned loans have fewer months remaining
        wam = max(1, wam - self.rng.randint(0, 36))

        # Balances cluster around conforming sizes
        face = round(min(max(self.rng.lognormvariate(12.6, 0.5), 25_000), 2_000_000), 2)

        return LoanInfo(
            id=f"LN-{self.fake.bothify('??######').upper()}",
            wam=wam,
            wac=round(self.rng.uniform(2.5, 8.0), 3),
            face=face,
            prepay_cpr=round(self.rng.uniform(0.0, 0.25), 4),
            static_dq=self.rng.random() < self.static_dq_share,
        )

    def generate_batch(self, count: int) -> Iterator[LoanInfo]:
        """Generate multiple random loans.

        Parameters
        ----------
        count : int
            Number of loans to generate.

        Yields
        ------
        LoanInfo
            Generated loans.
        """
        for _ in range(count):
            yield self.generate()

    @staticmethod
    def ladder(count: int, prefix: str = "LOAN") -> list[LoanInfo]:
        """Deterministic batch with terms and coupons stepping by index.

        Used by load tests so runs are comparable.
        """
        return [
            LoanInfo(
                id=f"{prefix}{i:06d}",
                wam=60 + (i % 3) * 90,
                wac=round(3.0 + (i % 50) * 0.1, 1),
                face=100000.0 + i * 5000,
                prepay_cpr=0.06,
                static_dq=i % 2 == 0,
            )
            for i in range(count)
        ]
