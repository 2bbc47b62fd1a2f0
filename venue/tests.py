from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase, Client, override_settings
from unittest.mock import patch
import json

from bookings.pricing import PriceTable
from .models import PriceSettings, StaffMember


PRICES = {
    'playzone_1hr': '250',
    'playzone_unlimited': '400',
    'skatepark_30min': '120',
    'skatepark_1hr': '180',
    'skatepark_extra_hour': '90',
}


class PriceSettingsModelTest(TestCase):
    def test_current_table_uses_defaults_without_a_row(self):
        table = PriceSettings.current_table()
        self.assertEqual(table, PriceTable(Decimal('200'), Decimal('350'), Decimal('100'), Decimal('150'), Decimal('100')))
        self.assertFalse(PriceSettings.objects.exists())

    @override_settings(DEFAULT_GAME_PRICES={**PRICES, 'playzone_1hr': '275'})
    def test_defaults_come_from_settings(self):
        self.assertEqual(PriceSettings.load().playzone_1hr, Decimal('275'))

    def test_only_one_row_is_kept(self):
        PriceSettings(**PRICES).save()
        PriceSettings(**{**PRICES, 'playzone_1hr': '300'}).save()
        self.assertEqual(PriceSettings.objects.count(), 1)
        self.assertEqual(PriceSettings.current_table().playzone_1hr, Decimal('300'))

    def test_unreadable_row_falls_back_to_defaults(self):
        PriceSettings(**PRICES).save()
        with patch.object(PriceSettings, 'objects') as mock_objects:
            mock_objects.filter.return_value.first.side_effect = DatabaseError('connection lost')
            table = PriceSettings.current_table()
        self.assertEqual(table.playzone_1hr, Decimal('200'))
        self.assertEqual(PriceSettings.current_table().playzone_1hr, Decimal('250'))


class PriceSettingsApiTest(TestCase):
    def setUp(self):
        self.client = Client()

    def put(self, payload):
        return self.client.put(
            '/api/venue/prices/',
            data=json.dumps(payload),
            content_type='application/json'
        )

    def test_get_returns_defaults(self):
        response = self.client.get('/api/venue/prices/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['playzone_1hr'], '200.00')
        self.assertEqual(data['skatepark_extra_hour'], '100.00')

    def test_update_prices(self):
        response = self.put(PRICES)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['prices']['skatepark_30min'], '120.00')

        prices = PriceSettings.load()
        self.assertEqual(prices.playzone_unlimited, Decimal('400'))
        self.assertEqual(prices.skatepark_extra_hour, Decimal('90'))

    def test_new_prices_apply_to_new_bookings_only(self):
        booking_payload = {'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr'}
        before = self.client.post('/api/bookings/', data=json.dumps(booking_payload), content_type='application/json')
        self.put(PRICES)
        after = self.client.post('/api/bookings/', data=json.dumps(booking_payload), content_type='application/json')

        self.assertEqual(before.json()['price'], '200.00')
        self.assertEqual(after.json()['price'], '250.00')

        old = self.client.get(f"/api/bookings/{before.json()['booking_id']}/")
        self.assertEqual(old.json()['price'], '200.00')

    def test_negative_price_rejected(self):
        response = self.put({**PRICES, 'skatepark_1hr': '-5'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('skatepark_1hr', response.json()['fields'])

    def test_all_prices_required(self):
        payload = dict(PRICES)
        del payload['playzone_unlimited']
        response = self.put(payload)
        self.assertEqual(response.status_code, 400)

    def test_invalid_json(self):
        response = self.client.put('/api/venue/prices/', data='nope', content_type='application/json')
        self.assertEqual(response.status_code, 400)


class StaffApiTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.member = StaffMember.objects.create(email='desk@example.com', name='Desk', role='counter')

    def test_list_staff(self):
        response = self.client.get('/api/venue/staff/')
        self.assertEqual([m['email'] for m in response.json()['staff']], ['desk@example.com'])

    def test_add_staff(self):
        response = self.client.post(
            '/api/venue/staff/',
            data=json.dumps({'email': 'owner@example.com', 'name': 'Owner', 'role': 'admin'}),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(StaffMember.objects.get(email='owner@example.com').role, 'admin')

    def test_duplicate_email_rejected(self):
        response = self.client.post(
            '/api/venue/staff/',
            data=json.dumps({'email': 'desk@example.com', 'name': 'Other'}),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.json()['fields'])

    def test_unknown_role_rejected(self):
        response = self.client.post(
            '/api/venue/staff/',
            data=json.dumps({'email': 'x@example.com', 'name': 'X', 'role': 'manager'}),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_update_keeps_email(self):
        response = self.client.patch(
            f'/api/venue/staff/{self.member.id}/',
            data=json.dumps({'name': 'Front Desk', 'role': 'admin', 'email': 'changed@example.com'}),
            content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)

        self.member.refresh_from_db()
        self.assertEqual(self.member.name, 'Front Desk')
        self.assertEqual(self.member.role, 'admin')
        self.assertEqual(self.member.email, 'desk@example.com')

    def test_delete_staff(self):
        response = self.client.delete(f'/api/venue/staff/{self.member.id}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(StaffMember.objects.exists())

        response = self.client.delete(f'/api/venue/staff/{self.member.id}/')
        self.assertEqual(response.status_code, 404)


class EnsurePriceSettingsCommandTest(TestCase):
    def test_creates_once(self):
        out = StringIO()
        call_command('ensure_price_settings', stdout=out)
        self.assertIn('Price settings created', out.getvalue())
        self.assertEqual(PriceSettings.objects.count(), 1)

        out = StringIO()
        call_command('ensure_price_settings', stdout=out)
        self.assertIn('already exist', out.getvalue())
