#!/usr/bin/env python3
"""Walk through sign-up, sign-in, Google sign-in and sign-out against a Firebase project."""

import argparse
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from firebase_facades import FirebaseAuth, FirebaseClient


def show_state(state):
    if state.signed_in:
        print(f"👤 Signed in as: {state.user['email']}")
    else:
        print("👤 Not signed in")


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('email')
    parser.add_argument('password')
    parser.add_argument('--create', action='store_true', help='Create the account first')
    parser.add_argument('--google', action='store_true', help='Also try Google sign-in')
    args = parser.parse_args()

    client = FirebaseClient.from_env()
    auth = FirebaseAuth(client)
    subscription = auth.on_auth_state_change(show_state)

    try:
        if args.create:
            result = auth.sign_up(args.email, args.password)
            if result.success:
                print(f"✓ User created: {result.data['uid']}")
            else:
                print(f"✗ Sign up error: {result.error}")

        result = auth.sign_in(args.email, args.password)
        if result.success:
            print(f"✓ Signed in: {result.data['email']}")
        else:
            print(f"✗ Sign in error: {result.error}")

        if args.google:
            result = auth.sign_in_with_google()
            if result.success:
                print(f"✓ Google sign in: {result.data['display_name']}")
            else:
                print(f"✗ Google sign in error: {result.error}")

        result = auth.logout()
        print("✓ Signed out successfully" if result.success else f"✗ Sign out error: {result.error}")
    finally:
        subscription.cancel()
        client.close()


if __name__ == "__main__":
    main()
