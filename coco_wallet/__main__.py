"""Command-line entry point: send one transfer or swap and watch it settle."""

import argparse
import logging
import os

from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Static

from coco_wallet.config import ApiConfig, EngineConfig
from coco_wallet.context import WalletContext, generate_device_id
from coco_wallet.features.transfer.models import Outcome, TransferIntent
from coco_wallet.features.transfer.screen import TransactionStatusScreen
from coco_wallet.shared.logging import setup_logging
from coco_wallet.transaction import TransactionManager

logger = logging.getLogger(__name__)

CSS = """
TransactionStatusScreen {
    align: center middle;
}

#tx-status-title {
    text-style: bold;
}

#tx-status-detail {
    margin: 1 0;
}
"""


class CocoWalletApp(App):
    CSS = CSS
    TITLE = "Coco Wallet"

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, manager: TransactionManager, intent: TransferIntent):
        super().__init__()
        self.manager = manager
        self.intent = intent
        self.outcome: Outcome | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(f"Wallet {self.manager.context.wallet_id}", id="wallet-label")
        yield Footer()

    def on_mount(self) -> None:
        self.push_screen(
            TransactionStatusScreen(self.manager, self.intent), self._on_closed
        )

    def _on_closed(self, outcome: Outcome | None) -> None:
        self.outcome = outcome
        self.exit(outcome)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coco-wallet", description="Submit a transfer or swap and track it."
    )
    parser.add_argument("--wallet-id", required=True)
    parser.add_argument("--address", required=True, help="Sending account address")
    parser.add_argument("--chain", default="evm")
    parser.add_argument("--device-id", default=None)
    parser.add_argument("--token", required=True, help="Source token address")
    parser.add_argument("--amount", required=True, help="Human-readable amount")
    parser.add_argument("--decimals", type=int, required=True)
    parser.add_argument("--to", dest="recipient", help="Recipient address")
    parser.add_argument("--to-token", dest="destination_token")
    parser.add_argument("--quote-id", dest="quote_reference")
    parser.add_argument("--slippage-bps", type=int, default=None)
    return parser


def main(argv=None):
    """Entry point for the application."""
    args = build_parser().parse_args(argv)
    setup_logging()

    context = WalletContext(
        device_id=args.device_id or generate_device_id(),
        wallet_id=args.wallet_id,
        chain=args.chain,
        address=args.address,
        payment_password=os.getenv("COCO_WALLET_PAYMENT_PASSWORD", ""),
    )
    intent = TransferIntent(
        source_token=args.token,
        human_amount=args.amount,
        token_decimals=args.decimals,
        recipient=args.recipient,
        destination_token=args.destination_token,
        quote_reference=args.quote_reference,
        slippage_bps=args.slippage_bps,
    )
    manager = TransactionManager(
        context,
        api_config=ApiConfig.from_environment(),
        engine_config=EngineConfig.from_environment(),
    )

    logger.info("Starting Coco Wallet for wallet %s", context.wallet_id)
    app = CocoWalletApp(manager, intent)
    app.run()


if __name__ == "__main__":
    main()
