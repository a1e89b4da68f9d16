"""End-to-end tests for the REST endpoints."""
from unittest import mock

from common.store import StoreError


class TestEnvelope:

    def test_health_needs_no_auth(self, api_client):
        response = api_client.get('/api/v1/health/')
        assert response.status_code == 200
        assert response.json()['status'] == 'ok'

    def test_unauthenticated(self, api_client, store):
        response = api_client.get('/api/v1/friends/')
        assert response.status_code == 401
        assert response.json()['success'] is False
        assert response.json()['error']['code'] == 'not_authenticated'

    def test_validation_error_details(self, client_for, alice):
        response = client_for(alice).post('/api/v1/friends/requests/', {'email': 'not-an-email'})

        assert response.status_code == 400
        error = response.json()['error']
        assert error['code'] == 'validation_error'
        assert 'email' in error['details']

    def test_store_failure_is_503(self, client_for, store, alice):
        client = client_for(alice)
        with mock.patch.object(store, 'run_query', side_effect=StoreError('unavailable')):
            response = client.get('/api/v1/friends/')

        assert response.status_code == 503
        assert response.json()['error']['code'] == 'store_error'


class TestUsers:

    def test_register_then_update(self, api_client, store, push):
        from common.authentication import FirebaseUser

        api_client.force_authenticate(
            user=FirebaseUser(uid='U7', email='dana@x.com', name='Dana'),
        )
        created = api_client.post('/api/v1/users/me/', {'fcm_token': 'token-dana'}, format='json')
        again = api_client.post('/api/v1/users/me/', {}, format='json')
        patched = api_client.patch('/api/v1/users/me/', {'display_name': 'D'}, format='json')

        assert created.status_code == 201
        assert created.json()['data']['email'] == 'dana@x.com'
        assert created.json()['data']['display_name'] == 'Dana'
        assert again.status_code == 200
        assert patched.json()['data']['display_name'] == 'D'
        assert store.get('users', 'U7').data['fcm_token'] == 'token-dana'

    def test_missing_profile(self, api_client, store):
        from common.authentication import FirebaseUser

        api_client.force_authenticate(user=FirebaseUser(uid='ghost'))
        response = api_client.get('/api/v1/users/me/')

        assert response.status_code == 404
        assert response.json()['error']['code'] == 'not_found'

    def test_disable_location_sharing(self, client_for, locations, alice):
        locations.update_location(alice.id, 1.0, 1.0)

        response = client_for(alice).put(
            '/api/v1/users/me/location-sharing/', {'enabled': False}, format='json',
        )

        assert response.status_code == 200
        assert locations.get_user_location(alice.id) is None

    def test_search(self, client_for, alice, bob):
        response = client_for(alice).get('/api/v1/users/search/', {'q': 'bo'})
        assert [user['id'] for user in response.json()['data']] == [bob.id]


class TestFriends:

    def test_request_accept_remove(self, client_for, store, alice, bob):
        sent = client_for(alice).post('/api/v1/friends/requests/', {'email': 'Bob@X.com'})
        assert sent.status_code == 201
        request_id = sent.json()['data']['id']
        assert sent.json()['data']['status'] == 'PENDING'

        outgoing = client_for(alice).get('/api/v1/friends/requests/sent/')
        assert [r['id'] for r in outgoing.json()['data']] == [request_id]

        received = client_for(bob).get('/api/v1/friends/requests/received/')
        assert [r['id'] for r in received.json()['data']] == [request_id]

        accepted = client_for(bob).post(f'/api/v1/friends/requests/{request_id}/accept/')
        assert accepted.status_code == 201
        assert accepted.json()['data']['friend_id'] == alice.id

        friends = client_for(alice).get('/api/v1/friends/')
        assert [f['friend_id'] for f in friends.json()['data']] == [bob.id]

        removed = client_for(bob).delete(f'/api/v1/friends/{alice.id}/')
        assert removed.status_code == 200
        assert store.collection('friendships').get() == []

    def test_error_codes(self, client_for, alice, bob):
        client = client_for(alice)
        client.post('/api/v1/friends/requests/', {'email': 'bob@x.com'})

        duplicate = client.post('/api/v1/friends/requests/', {'email': 'bob@x.com'})
        self_request = client.post('/api/v1/friends/requests/', {'email': 'alice@x.com'})
        unknown = client.post('/api/v1/friends/requests/', {'email': 'nobody@x.com'})

        assert (duplicate.status_code, duplicate.json()['error']['code']) == (409, 'duplicate_request')
        assert (self_request.status_code, self_request.json()['error']['code']) == (400, 'self_request')
        assert (unknown.status_code, unknown.json()['error']['code']) == (404, 'not_found')

    def test_sender_cannot_accept(self, client_for, friendships, alice, bob):
        request = friendships.send_friend_request(alice.id, 'bob@x.com')

        response = client_for(alice).post(f'/api/v1/friends/requests/{request.id}/accept/')

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'unauthorized'

    def test_decline_then_accept(self, client_for, friendships, alice, bob):
        request = friendships.send_friend_request(alice.id, 'bob@x.com')
        client = client_for(bob)

        assert client.post(f'/api/v1/friends/requests/{request.id}/decline/').status_code == 200
        response = client.post(f'/api/v1/friends/requests/{request.id}/accept/')

        assert response.status_code == 409
        assert response.json()['error']['code'] == 'request_resolved'


class TestAlerts:

    def test_send_read_delete(self, client_for, make_friends, alice, bob):
        make_friends(alice, bob)
        sent = client_for(alice).post('/api/v1/alerts/', {'to_user_id': bob.id}, format='json')
        assert sent.status_code == 201
        alert_id = sent.json()['data']['id']

        bob_client = client_for(bob)
        assert bob_client.get('/api/v1/alerts/unread-count/').json()['data'] == {'unread_count': 1}
        assert bob_client.post(f'/api/v1/alerts/{alert_id}/read/').json()['data']['is_read'] is True
        assert bob_client.get('/api/v1/alerts/unread-count/').json()['data'] == {'unread_count': 0}
        assert bob_client.delete(f'/api/v1/alerts/{alert_id}/').status_code == 200
        assert bob_client.get('/api/v1/alerts/').json()['data'] == []

    def test_alert_to_stranger_forbidden(self, client_for, store, alice, bob):
        response = client_for(alice).post('/api/v1/alerts/', {'to_user_id': bob.id}, format='json')

        assert response.status_code == 403
        assert response.json()['error']['code'] == 'unauthorized'
        assert store.collection('alerts').get() == []

    def test_alert_to_self_rejected(self, client_for, alice):
        response = client_for(alice).post('/api/v1/alerts/', {'to_user_id': alice.id}, format='json')
        assert response.status_code == 400
        assert 'to_user_id' in response.json()['error']['details']


class TestLocations:

    def test_update_and_read(self, client_for, make_friends, alice, bob):
        make_friends(alice, bob)

        updated = client_for(bob).post(
            '/api/v1/locations/update/', {'latitude': 48.85, 'longitude': 2.35}, format='json',
        )
        assert updated.status_code == 200

        mine = client_for(bob).get('/api/v1/locations/me/')
        assert mine.json()['data']['latitude'] == 48.85

        friends = client_for(alice).get('/api/v1/locations/friends/')
        assert [loc['user_id'] for loc in friends.json()['data']] == [bob.id]

    def test_out_of_range_coordinates(self, client_for, alice):
        response = client_for(alice).post(
            '/api/v1/locations/update/', {'latitude': 91, 'longitude': 0}, format='json',
        )
        assert response.status_code == 400

    def test_sharing_disabled(self, client_for, users, alice):
        users.set_location_sharing_enabled(alice.id, False)

        response = client_for(alice).post(
            '/api/v1/locations/update/', {'latitude': 1, 'longitude': 1}, format='json',
        )

        assert response.status_code == 400
        assert response.json()['error']['code'] == 'sharing_disabled'

    def test_no_location_yet(self, client_for, alice):
        response = client_for(alice).get('/api/v1/locations/me/')
        assert response.status_code == 404
