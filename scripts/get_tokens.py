"""One-time Gmail OAuth helper.

Runs the installed-app consent flow in a browser and prints the tokens as
environment lines for the server (GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET,
GOOGLE_REFRESH_TOKEN, GOOGLE_ACCESS_TOKEN).

Create a "Desktop app" OAuth client in the Google Cloud Console with the Gmail
API enabled, then run:

    python scripts/get_tokens.py --client-id ... --client-secret ...

Client credentials are read from the flags, then GOOGLE_CLIENT_ID /
GOOGLE_CLIENT_SECRET, and prompted for if still missing.
"""

from __future__ import annotations

import argparse
import getpass
import os

from google_auth_oauthlib.flow import InstalledAppFlow

from gmail_http_api.auth import GMAIL_SCOPES

CALLBACK_PORT = 3333


def _client_config(client_id: str, client_secret: str) -> dict:
    return {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [f"http://localhost:{CALLBACK_PORT}/"],
        }
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Authorize Gmail and print OAuth tokens")
    parser.add_argument("--client-id", default=os.environ.get("GOOGLE_CLIENT_ID"))
    parser.add_argument("--client-secret", default=os.environ.get("GOOGLE_CLIENT_SECRET"))
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Print the consent URL instead of opening a browser",
    )
    args = parser.parse_args()

    client_id = args.client_id or input("Client ID: ").strip()
    client_secret = args.client_secret or getpass.getpass("Client Secret: ").strip()
    if not client_id or not client_secret:
        print("Client ID and Client Secret are required.")
        return 1

    flow = InstalledAppFlow.from_client_config(
        _client_config(client_id, client_secret), scopes=list(GMAIL_SCOPES)
    )
    # Consent is forced so Google returns a refresh token on every run.
    creds = flow.run_local_server(
        port=CALLBACK_PORT,
        open_browser=not args.no_browser,
        access_type="offline",
        prompt="consent",
    )

    print(f"GOOGLE_CLIENT_ID={client_id}")
    print(f"GOOGLE_CLIENT_SECRET={client_secret}")
    if creds.refresh_token:
        print(f"GOOGLE_REFRESH_TOKEN={creds.refresh_token}")
    else:
        print(
            "No refresh token received. Revoke the app at "
            "https://myaccount.google.com/permissions and run this script again."
        )
        return 1
    print(f"GOOGLE_ACCESS_TOKEN={creds.token}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
