import itertools as it, operator as op, functools as ft
from collections import OrderedDict
from types import MappingProxyType

from . import utils as u, types as t
from .gtfs import GTFSError


log = u.get_logger('gtt.index')


def iter_records(record_cls, rows, table):
	for row in rows:
		try: yield record_cls.from_row(row)
		except KeyError as err:
			raise GTFSError('Missing required column in {}.txt: {}'.format(table, err.args[0]))


class FeedIndex:
	'''Read-only lookup structures built from raw GTFS table rows in one pass.
		Trips without any stop_times rows are not available from here at all,
			as there is nothing to put into timetable for them.'''

	def __init__(self, tables):
		stops = dict()
		for stop in iter_records(t.Stop, tables.stops, 'stops'):
			stops[stop.id] = stop.name

		routes = OrderedDict()
		for route in iter_records(t.Route, tables.routes, 'routes'):
			routes[route.id] = route

		stop_times = dict()
		for st in iter_records(t.StopTime, tables.stop_times, 'stop_times'):
			stop_times.setdefault(st.trip_id, list()).append(st)
		seq_key = lambda st: u.sequence_sort_key(st.sequence)
		for trip_id, st_list in stop_times.items(): # stable sort, non-numeric sequences go last
			stop_times[trip_id] = tuple(sorted(st_list, key=seq_key))

		route_trips, trips_skipped = dict(), 0
		for trip in iter_records(t.Trip, tables.trips, 'trips'):
			if trip.id not in stop_times:
				trips_skipped += 1
				continue
			route_trips.setdefault(trip.route_id, list()).append(trip)
		route_trips = dict((k, tuple(v)) for k, v in route_trips.items())

		calendar = dict()
		for sce in iter_records(t.CalendarEntry, tables.calendar, 'calendar'):
			calendar[sce.service_id] = sce

		agencies = list(iter_records(t.Agency, tables.agency, 'agency'))
		self.agency_default = agencies[0].name if len(agencies) == 1 else ''
		agencies = dict((a.id, a.name) for a in agencies if a.id and a.name)

		proxy = MappingProxyType
		self._stops, self._routes, self._route_trips = map(proxy, [stops, routes, route_trips])
		self._stop_times, self._calendar, self._agencies =\
			map(proxy, [stop_times, calendar, agencies])

		log.debug(
			'Built feed index: stops={:,}, routes={:,}, trips={:,}'
				' (skipped without stop_times: {:,}), calendar={:,}, agencies={:,}',
			len(stops), len(routes), sum(map(len, route_trips.values())),
			trips_skipped, len(calendar), len(agencies) )

	def stop_name(self, stop_id, default=None):
		return self._stops.get(stop_id, default)

	def routes(self): return tuple(self._routes.values())
	def route(self, route_id): return self._routes.get(route_id)

	def trips_for_route(self, route_id):
		'Return tuple of Trips with stop_times for route, in feed order.'
		return self._route_trips.get(route_id, ())

	def stop_times(self, trip_id):
		'Return StopTimes for trip sorted by stop_sequence, or None if there are none.'
		return self._stop_times.get(trip_id)

	def calendar(self, service_id): return self._calendar.get(service_id)

	def agency_name(self, agency_id):
		'Resolve agency name, defaulting to the only agency in the feed, if there is one.'
		if not agency_id: return self.agency_default
		return self._agencies.get(agency_id) or self.agency_default
