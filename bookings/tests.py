from datetime import date, datetime, timedelta
from decimal import Decimal
from django.db import DatabaseError, connection
from django.test import SimpleTestCase, TestCase, Client
from django.utils import timezone
from unittest.mock import patch
import json

from venue.models import PriceSettings
from .models import Booking, InvalidTransition
from .nepali_calendar import MONTH_DAYS, MONTH_NAMES, convert, month_length, to_nepali_date
from .pricing import PriceTable, compute_price
from .reports import dashboard_stats, derive_view, game_counts, period_start, revenue_summary
from .tokens import StoreUnavailable, allocate, next_token_number, parse_token


def make_booking(**overrides):
    fields = {
        'token_number': '1',
        'customer_name': 'Test User',
        'phone_number': '9800000001',
        'address': 'Lalitpur',
        'number_of_persons': 1,
        'date_english': date(2024, 5, 1),
        'date_nepali': '2081 बैशाख 19',
        'game_type': 'Playzone',
        'playzone_package': '1hr',
        'price': Decimal('200'),
        'status': Booking.PENDING,
    }
    fields.update(overrides)
    return Booking(**fields)


def failing_reads_from(table):
    """Execute wrapper that fails every SELECT touching ``table``."""
    def wrapper(execute, sql, params, many, context):
        if sql.lstrip().upper().startswith('SELECT') and table in sql:
            raise DatabaseError(f'{table} is unavailable')
        return execute(sql, params, many, context)
    return wrapper


class NepaliCalendarTest(SimpleTestCase):
    def test_epoch_is_first_of_baisakh_2081(self):
        self.assertEqual(to_nepali_date('2024-04-13'), '2081 बैशाख 1')
        self.assertTrue(convert(date(2024, 4, 13)).exact)

    def test_day_before_epoch_rolls_back_into_previous_year(self):
        result = convert(date(2024, 4, 12))
        self.assertEqual(result.label, '2080 चैत्र 30')
        self.assertEqual((result.year, result.month, result.day), (2080, 11, 30))
        self.assertTrue(result.exact)

    def test_rolls_forward_across_month_end(self):
        self.assertEqual(to_nepali_date(date(2024, 5, 14)), '2081 जेठ 1')

    def test_new_year_2082(self):
        self.assertEqual(to_nepali_date(date(2025, 4, 14)), '2082 बैशाख 1')

    def test_start_of_table(self):
        self.assertEqual(to_nepali_date(date(2023, 4, 14)), '2080 बैशाख 1')

    def test_dates_outside_table_use_thirty_day_months(self):
        result = convert(date(2023, 4, 13))
        self.assertEqual(result.label, '2079 चैत्र 30')
        self.assertFalse(result.exact)

        self.assertFalse(convert(date(2035, 1, 1)).exact)

    def test_conversion_is_idempotent(self):
        first = to_nepali_date('2024-12-25')
        second = to_nepali_date('2024-12-25')
        self.assertEqual(first, second)
        self.assertEqual(to_nepali_date(date(2024, 12, 25)), first)

    def test_accepts_datetime(self):
        self.assertEqual(to_nepali_date(datetime(2024, 4, 13, 18, 30)), '2081 बैशाख 1')

    def test_every_day_fits_its_month(self):
        day = date(2023, 1, 1)
        while day < date(2030, 1, 1):
            result = convert(day)
            days, _ = month_length(result.year, result.month)
            self.assertTrue(1 <= result.day <= days, f'{day} -> {result}')
            day += timedelta(days=1)

    def test_consecutive_days_advance_by_one(self):
        previous = convert(date(2024, 4, 13))
        day = date(2024, 4, 14)
        while day < date(2026, 4, 13):
            current = convert(day)
            if current.day != 1:
                self.assertEqual(current.day, previous.day + 1)
            else:
                days, _ = month_length(previous.year, previous.month)
                self.assertEqual(previous.day, days)
            previous = current
            day += timedelta(days=1)

    def test_impossible_date_falls_back_to_offset(self):
        result = convert('2024-02-30')
        self.assertEqual(result.label, '2081 जेठ 30')
        self.assertFalse(result.exact)

    def test_text_without_a_date_still_gets_a_label(self):
        today = date.today()
        result = convert('next tuesday')
        self.assertFalse(result.exact)
        self.assertEqual(result.label, f'{today.year + 57} {MONTH_NAMES[today.month - 1]} {today.day}')

    def test_month_out_of_range_still_gets_a_label(self):
        result = convert('2024-13-01')
        self.assertFalse(result.exact)
        self.assertIn(result.month_name, MONTH_NAMES)
        self.assertEqual(to_nepali_date('2024-13-01'), result.label)

    def test_custom_table(self):
        table = dict(MONTH_DAYS)
        table[2081] = (29,) * 12
        self.assertEqual(to_nepali_date(date(2024, 5, 12), table), '2081 जेठ 1')


class TokenAllocationTest(SimpleTestCase):
    def test_returns_max_plus_one(self):
        self.assertEqual(allocate(['3', '07', 'abc9']), '10')

    def test_empty_store_starts_at_one(self):
        self.assertEqual(allocate([]), '1')

    def test_ignores_tokens_without_digits(self):
        self.assertEqual(allocate(['', None, 'abc', '5']), '6')
        self.assertEqual(allocate(['abc', None]), '1')

    def test_strips_separators(self):
        self.assertEqual(parse_token('T-0042'), 42)
        self.assertEqual(allocate(['T-0042', '41']), '43')

    def test_oversized_token_is_ignored(self):
        self.assertIsNone(parse_token('9' * 5000))
        self.assertEqual(allocate(['9' * 5000, '5']), '6')

    def test_only_ascii_digits_count(self):
        self.assertIsNone(parse_token('४२'))
        self.assertEqual(allocate(['४२']), '1')
        self.assertEqual(allocate(['४२', 'T-3']), '4')

    def test_result_exceeds_every_parsed_token(self):
        tokens = ['12', '7', '100', 'x99']
        result = int(allocate(tokens))
        self.assertTrue(all(result > parse_token(t) for t in tokens))


class TokenStoreTest(TestCase):
    def test_reads_every_booking(self):
        make_booking(token_number='41').save()
        make_booking(token_number='7', date_english=date(2023, 1, 1)).save()
        self.assertEqual(next_token_number(), '42')

    @patch('bookings.tokens.existing_tokens')
    def test_store_failure_falls_back_to_one(self, mock_existing):
        mock_existing.side_effect = StoreUnavailable('store offline')
        self.assertEqual(next_token_number(), '1')

    def test_database_error_becomes_store_unavailable(self):
        from . import tokens

        with patch.object(Booking, 'objects') as mock_objects:
            mock_objects.values_list.side_effect = DatabaseError('connection lost')
            with self.assertRaises(StoreUnavailable):
                tokens.existing_tokens()


class PriceCalculationTest(SimpleTestCase):
    def setUp(self):
        self.prices = PriceTable(
            playzone_1hr=Decimal('200'),
            playzone_unlimited=Decimal('350'),
            skatepark_30min=Decimal('100'),
            skatepark_1hr=Decimal('150'),
            skatepark_extra_hour=Decimal('80'),
        )

    def test_playzone_multiplies_by_persons(self):
        self.assertEqual(compute_price('Playzone', '1hr', 0, 3, self.prices), Decimal('600'))
        self.assertEqual(compute_price('Playzone', 'unlimited', 0, 2, self.prices), Decimal('700'))

    def test_playzone_ignores_extra_hours(self):
        self.assertEqual(compute_price('Playzone', '1hr', 5, 1, self.prices), Decimal('200'))

    def test_skatepark_adds_extra_hours_before_persons(self):
        self.assertEqual(compute_price('Skatepark', '1hr', 2, 2, self.prices), Decimal('620'))

    def test_incomplete_selection_is_zero(self):
        self.assertEqual(compute_price('', None, 0, 1, self.prices), Decimal('0'))
        self.assertEqual(compute_price('Playzone', None, 0, 4, self.prices), Decimal('0'))
        self.assertEqual(compute_price('Skatepark', None, 2, 4, self.prices), Decimal('0'))
        self.assertEqual(compute_price('Bowling', '1hr', 0, 1, self.prices), Decimal('0'))

    def test_accepts_float_prices(self):
        prices = self.prices._replace(skatepark_30min=99.5)
        self.assertEqual(compute_price('Skatepark', '30min', 0, 2, prices), Decimal('199.0'))

    def test_stored_price_is_not_recalculated(self):
        booking = make_booking(game_type='Skatepark', playzone_package='', skatepark_base_package='30min',
                               skatepark_extra_hours=1, number_of_persons=2, price=Decimal('400'))
        self.assertEqual(booking.derived_price(self.prices), Decimal('360'))
        self.assertEqual(booking.price, Decimal('400'))


class DeriveViewTest(SimpleTestCase):
    def setUp(self):
        self.bookings = [
            make_booking(token_number='1', customer_name='Asha Rai', status='Pending'),
            make_booking(token_number='2', customer_name='Bikash', game_type='Skatepark', status='Completed',
                         phone_number='9811111111', date_english=date(2024, 5, 2)),
            make_booking(token_number='12', customer_name='Chandra', address='Kathmandu', status='Confirmed'),
        ]

    def test_no_filters_returns_everything(self):
        self.assertEqual(len(derive_view(self.bookings)), 3)

    def test_search_matches_name_token_address_phone(self):
        self.assertEqual([b.token_number for b in derive_view(self.bookings, search='asha')], ['1'])
        self.assertEqual([b.token_number for b in derive_view(self.bookings, search='KATHMANDU')], ['12'])
        self.assertEqual([b.token_number for b in derive_view(self.bookings, search='98111')], ['2'])

    def test_filters_combine(self):
        view = derive_view(self.bookings, date=date(2024, 5, 1), status='Confirmed', game_type='Playzone')
        self.assertEqual([b.token_number for b in view], ['12'])

    def test_token_filter_is_substring(self):
        self.assertEqual([b.token_number for b in derive_view(self.bookings, token='1')], ['1', '12'])

    def test_does_not_mutate_input(self):
        derive_view(self.bookings, status='Pending')
        self.assertEqual(len(self.bookings), 3)

    def test_game_counts(self):
        self.assertEqual(game_counts(self.bookings), [
            {'name': 'Playzone', 'count': 2},
            {'name': 'Skatepark', 'count': 1},
        ])


class RevenueTest(SimpleTestCase):
    def setUp(self):
        self.now = timezone.make_aware(datetime(2024, 5, 15, 12, 0))

    def test_week_starts_on_sunday(self):
        start = period_start('weekly', self.now)
        self.assertEqual(start.date(), date(2024, 5, 12))
        self.assertEqual((start.hour, start.minute), (0, 0))

    def test_month_start(self):
        self.assertEqual(period_start('monthly', self.now).date(), date(2024, 5, 1))

    def test_unknown_period(self):
        with self.assertRaises(ValueError):
            period_start('yearly', self.now)

    def test_only_completed_bookings_in_period_count(self):
        bookings = [
            make_booking(status='Completed', price=Decimal('300'), created_at=self.now - timedelta(hours=2)),
            make_booking(status='Completed', price=Decimal('150'), created_at=self.now - timedelta(days=2)),
            make_booking(status='Completed', price=Decimal('100'), created_at=self.now - timedelta(days=20)),
            make_booking(status='Pending', price=Decimal('999'), created_at=self.now - timedelta(hours=1)),
        ]
        self.assertEqual(revenue_summary(bookings, 'daily', self.now), Decimal('300'))
        self.assertEqual(revenue_summary(bookings, 'weekly', self.now), Decimal('450'))
        self.assertEqual(revenue_summary(bookings, 'monthly', self.now), Decimal('450'))
        self.assertEqual(revenue_summary(bookings, 'all', self.now), Decimal('550'))

    def test_dashboard_stats(self):
        bookings = [
            make_booking(status='Completed', price=Decimal('300'), actual_duration_minutes=40,
                         created_at=self.now),
            make_booking(status='Completed', price=Decimal('200'), actual_duration_minutes=60,
                         created_at=self.now),
            make_booking(status='Confirmed', created_at=self.now - timedelta(hours=3)),
            make_booking(status='Pending', created_at=self.now),
        ]
        stats = dashboard_stats(bookings)
        self.assertEqual(stats['total_bookings'], 4)
        self.assertEqual(stats['pending_bookings'], 1)
        self.assertEqual(stats['confirmed_bookings'], 1)
        self.assertEqual(stats['completed_bookings'], 2)
        self.assertEqual(stats['revenue'], Decimal('500'))
        self.assertEqual(stats['average_session_minutes'], 50)
        self.assertEqual(stats['peak_hour'], '12:00')
        self.assertEqual(stats['conversion_rate'], 50)

    def test_dashboard_stats_empty(self):
        stats = dashboard_stats([])
        self.assertEqual(stats['peak_hour'], 'N/A')
        self.assertEqual(stats['conversion_rate'], 0)


class BookingLifecycleTest(TestCase):
    def setUp(self):
        self.booking = make_booking()
        self.booking.save()
        self.start = timezone.now()

    def test_confirm_then_complete_records_duration(self):
        self.booking.confirm(now=self.start)
        self.assertEqual(self.booking.status, Booking.CONFIRMED)

        self.booking.complete(now=self.start + timedelta(minutes=45, seconds=20))
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.COMPLETED)
        self.assertEqual(self.booking.actual_duration_minutes, 45)

    def test_cannot_complete_pending(self):
        with self.assertRaises(InvalidTransition):
            self.booking.complete()

    def test_cannot_confirm_twice(self):
        self.booking.confirm()
        with self.assertRaises(InvalidTransition):
            self.booking.confirm()


class BookingCreationTest(TestCase):
    def setUp(self):
        self.client = Client()

    def post(self, payload):
        return self.client.post(
            '/api/bookings/',
            data=json.dumps(payload),
            content_type='application/json'
        )

    def test_skatepark_booking_uses_current_prices(self):
        PriceSettings.objects.create(
            playzone_1hr=200,
            playzone_unlimited=350,
            skatepark_30min=100,
            skatepark_1hr=150,
            skatepark_extra_hour=100,
        )

        response = self.post({
            'customer_name': 'Sujan',
            'phone_number': '9800000000',
            'game_type': 'Skatepark',
            'skatepark_base_package': '30min',
            'skatepark_extra_hours': 1,
            'number_of_persons': 4,
            'date_english': '2024-04-13',
        })

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['price'], '800.00')
        self.assertEqual(data['token_number'], '1')
        self.assertEqual(data['date_nepali'], '2081 बैशाख 1')
        self.assertTrue(data['date_nepali_exact'])
        self.assertEqual(data['status'], 'Pending')

        booking = Booking.objects.get(id=data['booking_id'])
        self.assertEqual(booking.price, Decimal('800'))
        self.assertEqual(booking.skatepark_extra_hours, 1)
        self.assertEqual(booking.playzone_package, '')

    def test_tokens_increase_across_bookings(self):
        make_booking(token_number='41').save()
        first = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr'})
        second = self.post({'customer_name': 'B', 'game_type': 'Playzone', 'playzone_package': 'unlimited'})
        self.assertEqual(first.json()['token_number'], '42')
        self.assertEqual(second.json()['token_number'], '43')

    def test_defaults_to_today(self):
        response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr'})
        data = response.json()
        self.assertEqual(data['date_english'], timezone.localdate().isoformat())
        self.assertEqual(data['date_nepali'], to_nepali_date(timezone.localdate()))
        self.assertEqual(data['price'], '200.00')

    @patch('bookings.tokens.existing_tokens')
    def test_store_failure_assigns_token_one(self, mock_existing):
        mock_existing.side_effect = StoreUnavailable('store offline')
        response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['token_number'], '1')

    def test_failed_token_read_keeps_transaction_usable(self):
        make_booking(token_number='41').save()
        with connection.execute_wrapper(failing_reads_from('bookings_booking')):
            response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['token_number'], '1')
        self.assertEqual(Booking.objects.count(), 2)

    def test_failed_price_read_uses_default_prices(self):
        with connection.execute_wrapper(failing_reads_from('venue_price_settings')):
            response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr',
                                  'number_of_persons': 2})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['price'], '400.00')

    def test_persons_must_be_a_whole_number(self):
        for value in (2.5, True, '2.5', 'two'):
            response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr',
                                  'number_of_persons': value})
            self.assertEqual(response.status_code, 400, value)
        self.assertEqual(Booking.objects.count(), 0)

    def test_whole_float_persons_accepted(self):
        response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr',
                              'number_of_persons': 3.0})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['number_of_persons'], 3)

    def test_extra_hours_must_be_a_whole_number(self):
        response = self.post({'customer_name': 'A', 'game_type': 'Skatepark', 'skatepark_base_package': '1hr',
                              'skatepark_extra_hours': 1.5})
        self.assertEqual(response.status_code, 400)

    def test_missing_fields(self):
        response = self.post({'game_type': 'Playzone'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('Missing required fields', response.json()['error'])

    def test_package_must_match_game(self):
        response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '30min'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Booking.objects.count(), 0)

    def test_invalid_persons_and_date(self):
        response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr',
                              'number_of_persons': 0})
        self.assertEqual(response.status_code, 400)

        response = self.post({'customer_name': 'A', 'game_type': 'Playzone', 'playzone_package': '1hr',
                              'date_english': '2024-02-30'})
        self.assertEqual(response.status_code, 400)

    def test_invalid_json(self):
        response = self.client.post('/api/bookings/', data='{nope', content_type='application/json')
        self.assertEqual(response.status_code, 400)


class BookingApiTest(TestCase):
    def setUp(self):
        self.client = Client()
        self.today = timezone.localdate()
        self.pending = make_booking(token_number='1', customer_name='Asha', date_english=self.today)
        self.pending.save()
        self.other = make_booking(token_number='2', customer_name='Bikash', phone_number='9811111111',
                                  game_type='Skatepark', playzone_package='', skatepark_base_package='1hr',
                                  price=Decimal('150'), date_english=date(2024, 1, 1))
        self.other.save()

    def test_list_filters(self):
        response = self.client.get('/api/bookings/', {'date': self.today.isoformat()})
        self.assertEqual(response.json()['count'], 1)

        response = self.client.get('/api/bookings/', {'game_type': 'Skatepark'})
        self.assertEqual([b['token_number'] for b in response.json()['bookings']], ['2'])

        response = self.client.get('/api/bookings/', {'search': 'bik'})
        self.assertEqual(response.json()['count'], 1)

    def test_get_and_delete(self):
        response = self.client.get(f'/api/bookings/{self.pending.id}/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['customer_name'], 'Asha')

        response = self.client.delete(f'/api/bookings/{self.pending.id}/')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Booking.objects.filter(id=self.pending.id).exists())

        response = self.client.get(f'/api/bookings/{self.pending.id}/')
        self.assertEqual(response.status_code, 404)

    def test_status_progression(self):
        response = self.client.post(f'/api/bookings/{self.pending.id}/complete/')
        self.assertEqual(response.status_code, 409)

        response = self.client.post(f'/api/bookings/{self.pending.id}/confirm/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'Confirmed')
        self.assertIsNotNone(response.json()['start_time'])

        response = self.client.post(f'/api/bookings/{self.pending.id}/complete/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'Completed')
        self.assertEqual(data['actual_duration_minutes'], 0)

        response = self.client.post(f'/api/bookings/{self.pending.id}/confirm/')
        self.assertEqual(response.status_code, 409)

    def test_status_endpoints_reject_get(self):
        response = self.client.get(f'/api/bookings/{self.pending.id}/confirm/')
        self.assertEqual(response.status_code, 405)

    def test_auto_approve(self):
        response = self.client.post('/api/bookings/auto-approve/')
        self.assertEqual(response.json()['approved'], 2)
        self.assertFalse(Booking.objects.filter(status=Booking.PENDING).exists())

        response = self.client.post('/api/bookings/auto-approve/')
        self.assertEqual(response.json()['approved'], 0)

    def test_quote(self):
        response = self.client.get('/api/bookings/quote/', {
            'game_type': 'Skatepark',
            'skatepark_base_package': '1hr',
            'skatepark_extra_hours': '2',
            'number_of_persons': '2',
            'date_english': '2024-04-12',
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['price'], '700.00')
        self.assertEqual(data['date_nepali'], '2080 चैत्र 30')

    def test_quote_survives_unreadable_prices_and_bad_dates(self):
        with connection.execute_wrapper(failing_reads_from('venue_price_settings')):
            response = self.client.get('/api/bookings/quote/', {
                'game_type': 'Playzone',
                'playzone_package': 'unlimited',
                'date_english': '2024-04-13',
            })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['price'], '350.00')

        response = self.client.get('/api/bookings/quote/', {'game_type': 'Playzone', 'date_english': 'next tuesday'})
        self.assertEqual(response.status_code, 400)

    def test_quote_without_selection_is_zero(self):
        response = self.client.get('/api/bookings/quote/', {'game_type': 'Playzone'})
        self.assertEqual(response.json()['price'], '0.00')

    def test_customer_history_matches_name_or_phone(self):
        response = self.client.get('/api/bookings/history/', {'q': '9811111111'})
        self.assertEqual([b['token_number'] for b in response.json()['bookings']], ['2'])

        response = self.client.get('/api/bookings/history/', {'q': 'Asha'})
        self.assertEqual(response.json()['count'], 1)

        response = self.client.get('/api/bookings/history/', {'q': 'Ash'})
        self.assertEqual(response.json()['count'], 0)

    def test_stats_and_revenue(self):
        self.pending.confirm()
        self.pending.complete()

        response = self.client.get('/api/bookings/stats/')
        data = response.json()
        self.assertEqual(data['total_bookings'], 1)
        self.assertEqual(data['completed_bookings'], 1)
        self.assertEqual(Decimal(data['revenue']), Decimal('200'))

        response = self.client.get('/api/bookings/reports/revenue/', {'period': 'daily'})
        self.assertEqual(response.json()['revenue'], '200.00')

        response = self.client.get('/api/bookings/reports/revenue/', {'period': 'yearly'})
        self.assertEqual(response.status_code, 400)

    def test_games_report(self):
        response = self.client.get('/api/bookings/reports/games/')
        self.assertEqual(response.json()['games'], [
            {'name': 'Playzone', 'count': 1},
            {'name': 'Skatepark', 'count': 1},
        ])
