"""CLI entry point for the OrderKuota client."""

import argparse
import base64
import json
import sys
from pathlib import Path

from orderkuota.clients import AppClient, GatewayClient
from orderkuota.config import settings
from orderkuota.errors import OrderKuotaError
from orderkuota.qris import QrisPayload


def _print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def cmd_balance(args):
    with GatewayClient() as client:
        _print_json(client.check_balance().to_display_dict())


def cmd_history(args):
    with GatewayClient() as client:
        fetch = {
            "qris": client.fetch_qris_history,
            "va": client.fetch_virtual_account_history,
            "retail": client.fetch_retail_history,
        }[args.kind]
        history = fetch()
    _print_json(history.model_dump(mode="json"))


def cmd_qris(args):
    with GatewayClient() as client:
        qris = client.generate_qris_string(args.amount)
        print(qris)
        if args.image:
            png = base64.b64decode(client.generate_qris_image(qris, {"width": args.width}))
            args.image.write_bytes(png)
            print(f"QR code saved to {args.image}", file=sys.stderr)


def cmd_decode(args):
    _print_json(QrisPayload.parse(args.payload).to_display_dict())


def cmd_otp(args):
    with AppClient() as client:
        _print_json(client.request_otp().model_dump(mode="json"))


def cmd_token(args):
    with AppClient() as client:
        result = client.get_token(args.otp)
    _print_json(result.model_dump(mode="json"))
    if result.status == "success":
        print("\nSave the token as ORDERKUOTA_AUTH_TOKEN to reuse it.", file=sys.stderr)


def cmd_app_balance(args):
    with AppClient() as client:
        _print_json(client.check_balance().model_dump(mode="json"))


def cmd_app_history(args):
    with AppClient() as client:
        result = client.get_qris_history(page=args.page, per_page=args.per_page)
    _print_json(result.model_dump(mode="json"))


def cmd_ajaib(args):
    with AppClient() as client:
        result = client.generate_qris_ajaib(args.amount)
    _print_json(result.model_dump(mode="json", exclude={"results"}))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="OrderKuota / OkeConnect payment gateway client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Credentials are read from ORDERKUOTA_* environment variables or a .env file.

Examples:
  python main.py balance                 # H2H balance
  python main.py history qris            # QRIS mutasi
  python main.py qris 50000 --image q.png
  python main.py decode 000201010212...  # Inspect a QRIS payload
  python main.py otp && python main.py token 123456
  python main.py app-history --page 2
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("balance", help="Check H2H balance").set_defaults(func=cmd_balance)

    history = sub.add_parser("history", help="Fetch gateway transaction history")
    history.add_argument("kind", choices=["qris", "va", "retail"])
    history.set_defaults(func=cmd_history)

    qris = sub.add_parser("qris", help="Generate a dynamic QRIS from the static base")
    qris.add_argument("amount", type=int, help="Amount in IDR")
    qris.add_argument("--image", type=Path, default=None, help="Also write a PNG here")
    qris.add_argument(
        "--width",
        type=int,
        default=settings.qr_image.width,
        help=f"PNG width in pixels (default: {settings.qr_image.width})",
    )
    qris.set_defaults(func=cmd_qris)

    decode = sub.add_parser("decode", help="Decode a QRIS payload")
    decode.add_argument("payload")
    decode.set_defaults(func=cmd_decode)

    sub.add_parser("otp", help="Request a login OTP").set_defaults(func=cmd_otp)

    token = sub.add_parser("token", help="Exchange an OTP for an auth token")
    token.add_argument("otp")
    token.set_defaults(func=cmd_token)

    sub.add_parser("app-balance", help="Balance from the app account menu").set_defaults(
        func=cmd_app_balance
    )

    app_history = sub.add_parser("app-history", help="QRIS history from the app API")
    app_history.add_argument("--page", type=int, default=1)
    app_history.add_argument("--per-page", type=int, default=None)
    app_history.set_defaults(func=cmd_app_history)

    ajaib = sub.add_parser("ajaib", help="Server-side dynamic QRIS")
    ajaib.add_argument("amount", type=int, help="Amount in IDR")
    ajaib.set_defaults(func=cmd_ajaib)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except OrderKuotaError as e:
        print(f"Error [{e.code.value}]: {e.message}", file=sys.stderr)
        if e.status:
            print(f"HTTP status: {e.status}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
