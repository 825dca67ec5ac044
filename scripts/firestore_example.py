#!/usr/bin/env python3
"""Exercise Firestore CRUD and real-time listeners on the users collection."""

import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from firebase_facades import FirebaseClient, FirebaseDataLayer, SubscriptionClosed, UserDirectory


def run():
    client = FirebaseClient.from_env()
    users = UserDirectory(FirebaseDataLayer(client))

    print("Listening to users...")
    listener = users.listen_to_users(lambda records: print(f"🔄 Real-time update: {len(records)} users"))

    try:
        result = users.add_user({'name': 'Test User', 'status': 'active'})
        if not result.success:
            print(f"✗ Error adding document: {result.error}")
            return
        user_id = result.data['id']
        print(f"✓ Document written with ID: {user_id}")

        user_listener = users.listen_to_user(user_id)

        result = users.get_user(user_id)
        print(f"✓ User data: {result.data}" if result.success else f"✗ {result.error}")

        result = users.create_user_profile(user_id, {'bio': 'Created by firestore_example.py'})
        print(f"✓ Profile created for user: {user_id}" if result.success else f"✗ {result.error}")

        result = users.update_user(user_id, {'name': 'Renamed User'})
        print(f"✓ User updated: {user_id}" if result.success else f"✗ {result.error}")

        result = users.get_active_users()
        if result.success:
            print(f"✓ Found {len(result.data)} active users")

        result = users.get_all_users()
        if result.success:
            print(f"✓ Found {len(result.data)} users")

        result = users.delete_user(user_id)
        print(f"✓ User deleted: {user_id}" if result.success else f"✗ {result.error}")

        # Drain what the single-document listener saw, ending with the delete
        user_listener.cancel()
        try:
            while True:
                print(f"  document event: {user_listener.next(timeout=1)}")
        except (SubscriptionClosed, TimeoutError):
            pass
    finally:
        listener.cancel()
        client.close()


if __name__ == "__main__":
    run()
