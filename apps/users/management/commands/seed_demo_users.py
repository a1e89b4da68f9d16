"""
Management command to seed two demo users who are already friends.

Usage:
    python manage.py seed_demo_users
"""
from django.core.management.base import BaseCommand

from apps.friends.services.lifecycle import FriendshipService
from apps.users.services.profiles import UserService
from common.store import get_document_store

DEMO_USERS = [
    ('demo-alice', 'alice@friendlocator.app', 'Alice Demo'),
    ('demo-bob', 'bob@friendlocator.app', 'Bob Demo'),
]


class Command(BaseCommand):
    help = 'Create demo users alice@friendlocator.app and bob@friendlocator.app and make them friends'

    def handle(self, *args, **options):
        store = get_document_store()
        users = UserService(store=store)
        friendships = FriendshipService(store=store, users=users)

        for uid, email, name in DEMO_USERS:
            users.create_or_update_user(uid, email=email, display_name=name)
            self.stdout.write(f'Demo user ready: {email} (id={uid})')

        (alice_id, _, _), (bob_id, bob_email, _) = DEMO_USERS
        if friendships.are_friends(alice_id, bob_id):
            self.stdout.write(self.style.SUCCESS('Demo users are already friends.'))
            return

        pending = [r for r in friendships.sent_requests(alice_id) if r.to_user_id == bob_id]
        request = pending[0] if pending else friendships.send_friend_request(alice_id, bob_email)
        friendships.accept_friend_request(bob_id, request.id)
        self.stdout.write(self.style.SUCCESS('Demo users are now friends.'))
