import unittest, random

from . import _common as c

gtt = c.gtt


class FeedIndexTests(unittest.TestCase):

	def setUp(self):
		self.data = c.load_feed_data('multi')
		self.index = gtt.index.FeedIndex(c.feed_tables(self.data))

	def test_stop_names(self):
		self.assertEqual(self.index.stop_name('h1'), 'Harbour Gate')
		self.assertEqual(self.index.stop_name('h2'), 'Fish Market Square') # last one wins
		self.assertIsNone(self.index.stop_name('nx'))

	def test_routes(self):
		self.assertEqual(list(r.id for r in self.index.routes()), ['r1', 'r2', 'r3'])
		route = self.index.route('r1')
		self.assertEqual((route.short_name, route.long_name, route.agency_id), ('10', 'Harbour Loop', 'a1'))
		self.assertIsNone(self.index.route('nx'))

	def test_trips_without_stop_times_excluded(self):
		trips = self.index.trips_for_route('r1')
		self.assertEqual(list(trip.id for trip in trips), ['t10', 't11', 't12', 't13'])
		self.assertIsNone(self.index.stop_times('t14'))
		self.assertEqual(self.index.trips_for_route('nx'), ())

	def test_stop_times_sorted(self):
		st_list = self.index.stop_times('t10')
		self.assertEqual(list(st.sequence for st in st_list), [10, 20, 30])
		self.assertEqual(list(st.stop_id for st in st_list), ['h1', 'h2', 'h3'])
		self.assertEqual(st_list[1].time, '09:10:00') # departure falls back to arrival

	def test_stop_times_sort_is_numeric_and_stable(self):
		rows = list()
		for seq, stop_id in [(10, 'a'), (9, 'b'), (100, 'c'), (9, 'd'), (1, 'e')]:
			rows.append(dict( trip_id='t', stop_id=stop_id,
				stop_sequence=str(seq), arrival_time='', departure_time='' ))
		tables = c.feed_tables(dict(), stop_times=rows)
		st_list = gtt.index.FeedIndex(tables).stop_times('t')
		self.assertEqual(list(st.stop_id for st in st_list), ['e', 'b', 'd', 'a', 'c'])

	def test_shuffled_input_same_order(self):
		tables = c.feed_tables(self.data)
		order = lambda index: list(
			(st.stop_id, st.sequence) for trip_id in ['t10', 't12', 't30']
			for st in index.stop_times(trip_id) )
		order_base = order(self.index)
		rng = random.Random(1234)
		for n in range(5):
			rng.shuffle(tables.stop_times)
			self.assertEqual(order(gtt.index.FeedIndex(tables)), order_base)

	def test_agency_names(self):
		self.assertEqual(self.index.agency_name('a1'), 'City Transit')
		self.assertEqual(self.index.agency_name('a9'), '') # no default with two agencies
		self.assertEqual(self.index.agency_name(''), '')

	def test_agency_default(self):
		tables = c.feed_tables(self.data, agency=[dict(agency_name='Solo Bus')])
		index = gtt.index.FeedIndex(tables)
		self.assertEqual(index.agency_name(''), 'Solo Bus')
		self.assertEqual(index.agency_name('a1'), 'Solo Bus')
		tables = c.feed_tables(self.data, agency=list())
		self.assertEqual(gtt.index.FeedIndex(tables).agency_name('a1'), '')

	def test_calendar(self):
		self.assertEqual(self.index.calendar('we').start_date, '20240106')
		self.assertIsNone(self.index.calendar(''))

	def test_read_only(self):
		with self.assertRaises(TypeError): self.index._stops['h1'] = 'x'
		with self.assertRaises(TypeError): self.index._route_trips['r1'] = ()
		self.assertIsInstance(self.index.trips_for_route('r1'), tuple)
		self.assertIsInstance(self.index.stop_times('t10'), tuple)

	def test_decimal_sequence(self):
		rows = c.stop_time_rows('t', '8:00', '8:10', '8:20', stops=['a', 'b', 'c'])
		for row, seq in zip(rows, ['2.5', ' 1.0', '10']): row['stop_sequence'] = seq
		st_list = gtt.index.FeedIndex(c.feed_tables(dict(), stop_times=rows)).stop_times('t')
		self.assertEqual(list(st.stop_id for st in st_list), ['b', 'a', 'c'])
		self.assertEqual(list(st.sequence for st in st_list), [1, 2.5, 10])

	def test_invalid_sequence_sorted_last(self):
		rows = c.stop_time_rows('t', '8:00', '8:10', '8:20', '8:30', stops=list('abcd'))
		for row, seq in zip(rows, ['first', '3', '', '1']): row['stop_sequence'] = seq
		st_list = gtt.index.FeedIndex(c.feed_tables(dict(), stop_times=rows)).stop_times('t')
		self.assertEqual(list(st.stop_id for st in st_list), ['d', 'b', 'a', 'c'])
		self.assertEqual(list(st.sequence for st in st_list), [1, 3, None, None])

	def test_missing_column(self):
		with self.assertRaises(gtt.gtfs.GTFSError) as ctx:
			gtt.index.FeedIndex(c.feed_tables(dict(), trips=[dict(trip_id='t1')]))
		self.assertIn('route_id', str(ctx.exception))
