import itertools as it, operator as op, functools as ft
from collections import OrderedDict

from . import utils as u, types as t, summary as sm
from .gtfs import GTFSError, route_matches
from .index import FeedIndex


@u.attr_struct(vals_to_attrs=True)
class TimetableConf:
	route = None # route_id or route_short_name to build timetables for, all routes if None
	max_trips = 8 # trip columns per timetable page
	major_stops = frozenset() # normalized (stripped/lowercase) stop names/ids to emphasize
	stop_label = 'Stop' # header for the first column

	# Which trip defines list/order of stop rows on each page:
	#  "cohort" - earliest trip of the service_id group, "page" - first trip on that page.
	stop_order = 'cohort'


fallback_service_id = 'no-service-id'
stop_orders = 'cohort', 'page'

class TimetableError(GTFSError): pass


def trip_start_minutes(stop_times):
	'''Minute offset of first stop departure/arrival, used only as a sort key.
		Trips with missing/unparsable first time are sorted as if starting at 00:00.'''
	if not stop_times: return 0
	minutes = u.parse_time(stop_times[0].time)
	return minutes if minutes is not None else 0

def sort_trips(index, trips):
	'Return list of trips sorted by start time, keeping original order for same-time ones.'
	return sorted(trips, key=lambda trip: trip_start_minutes(index.stop_times(trip.id)))

def chunk_trips(trips, size):
	'Split list into consecutive chunks of up to "size" items, or one chunk if size is invalid.'
	trips = list(trips)
	if not trips: return list()
	if not isinstance(size, int) or isinstance(size, bool) or size <= 0: size = len(trips)
	return list(trips[n:n+size] for n in range(0, len(trips), size))

def group_by_service(trips):
	'''Group trips into OrderedDict of {service_id: [trip, ...]} service cohorts.
		Trips without service_id share the same fallback group.'''
	cohorts = OrderedDict()
	for trip in trips:
		cohorts.setdefault(trip.service_id or fallback_service_id, list()).append(trip)
	return cohorts


def stop_cell(stop_times, stop_id):
	'Formatted time for first stop_time with specified stop_id, or empty string.'
	for st in stop_times:
		if st.stop_id == stop_id: return u.format_time(st.time)
	return ''

def build_rows(index, trips, stop_ids):
	'Return list of [stop_name, time, ...] rows for stop_ids and trips.'
	trip_stops = list(index.stop_times(trip.id) for trip in trips)
	rows = list()
	for stop_id in stop_ids:
		row = [index.stop_name(stop_id) or stop_id]
		row.extend(stop_cell(st_list, stop_id) for st_list in trip_stops)
		rows.append(row)
	return rows


class TimetableBuilder:

	def __init__(self, index, conf=None, timer_func=None):
		self.index, self.conf = index, conf or TimetableConf()
		self.log = u.get_logger('gtt.engine')
		self.timer_wrapper = timer_func if timer_func else lambda f,*a,**k: f(*a,**k)
		self.major_stops = frozenset(filter( None,
			map(u.normalize_stop_value, self.conf.major_stops or ()) ))
		if self.conf.stop_order not in stop_orders:
			raise ValueError('Unknown stop_order value: {!r}'.format(self.conf.stop_order))

	def routes(self):
		return list( route for route in self.index.routes()
			if route_matches(self.conf.route, route.id, route.short_name) )

	def stop_ids_for_trip(self, trip):
		return list(st.stop_id for st in self.index.stop_times(trip.id))

	def build_cohort(self, route, agency_name, service_id, trips):
		'Return list of TimetablePages for trips of a single route and service cohort.'
		trips = sort_trips(self.index, trips)
		summary = sm.service_summary(self.index.calendar(trips[0].service_id))
		stop_ids_cohort = self.stop_ids_for_trip(trips[0])
		chunks, pages = chunk_trips(trips, self.conf.max_trips), list()
		for n, chunk in enumerate(chunks, 1):
			stop_ids = stop_ids_cohort if self.conf.stop_order != 'page'\
				else self.stop_ids_for_trip(chunk[0])
			pages.append(t.TimetablePage(
				route=route, agency_name=agency_name,
				headers=[self.conf.stop_label] + list(trip.label for trip in chunk),
				rows=build_rows(self.index, chunk, stop_ids), stop_ids=stop_ids,
				major_stops=self.major_stops, summary=summary, service_id=service_id,
				page_index=n, page_count=len(chunks), trips=tuple(chunk) ))
		return pages

	def build_route(self, route):
		trips = self.index.trips_for_route(route.id)
		if not trips:
			self.log.debug('Skipping route without any trip stop_times: {}', route.id)
			return list()
		cohorts = group_by_service(trips)
		agency_name, pages = self.index.agency_name(route.agency_id), list()
		for service_id, cohort_trips in cohorts.items():
			pages.extend(self.build_cohort( route, agency_name,
				service_id if len(cohorts) > 1 else None, cohort_trips ))
		self.log.debug( 'Route {} ({}): trips={}, service'
			' groups={}, pages={}', route.number, route.id, len(trips), len(cohorts), len(pages) )
		return pages

	def build(self):
		'Return list of TimetablePages for all matching routes or raise TimetableError.'
		pages = list()
		for route in self.routes(): pages.extend(self.timer_wrapper(self.build_route, route))
		if not pages:
			raise TimetableError('No matching timetables found for the provided GTFS feed.')
		return pages


def build_timetables(tables, conf=None, timer_func=None):
	'Build list of TimetablePages from FeedTables or FeedIndex.'
	index = tables
	if not isinstance(index, FeedIndex):
		index = timer_func(FeedIndex, tables) if timer_func else FeedIndex(tables)
	return TimetableBuilder(index, conf, timer_func=timer_func).build()
