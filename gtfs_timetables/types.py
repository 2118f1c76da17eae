import itertools as it, operator as op, functools as ft

from . import utils as u, summary as sm


weekday_columns = [ 'monday', 'tuesday',
	'wednesday', 'thursday', 'friday', 'saturday', 'sunday' ]


### Feed records

# Optional GTFS columns are stored as empty strings, not None,
#  same as how csv module returns them for empty cells.

@u.attr_struct(frozen=True)
class Route:
	keys = 'id short_name long_name desc agency_id'

	@classmethod
	def from_row(cls, row):
		return cls( row['route_id'], row.get('route_short_name') or '',
			row.get('route_long_name') or '', row.get('route_desc') or '',
			row.get('agency_id') or '' )

	@property
	def number(self): return self.short_name or self.id

	@property
	def title(self): return self.long_name or self.id

	@property
	def subtitle(self): return self.desc if self.long_name else ''

@u.attr_struct(frozen=True)
class Trip:
	keys = 'id route_id service_id headsign'

	@classmethod
	def from_row(cls, row):
		return cls( row['trip_id'], row['route_id'],
			row.get('service_id') or '', row.get('trip_headsign') or '' )

	@property
	def label(self): return self.headsign or self.id

@u.attr_struct(frozen=True)
class StopTime:
	keys = 'trip_id stop_id sequence arrival departure'

	@classmethod
	def from_row(cls, row):
		return cls( row['trip_id'], row['stop_id'], u.parse_sequence(row['stop_sequence']),
			row.get('arrival_time') or '', row.get('departure_time') or '' )

	@property
	def time(self):
		'Departure time, falling back to arrival, falling back to empty string.'
		return self.departure or self.arrival or ''

@u.attr_struct(frozen=True)
class Stop:
	keys = 'id name'

	@classmethod
	def from_row(cls, row): return cls(row['stop_id'], row.get('stop_name') or '')

@u.attr_struct(frozen=True)
class CalendarEntry:
	keys = 'service_id weekdays start_date end_date'

	@classmethod
	def from_row(cls, row):
		weekdays = tuple(str(row.get(k) or '').strip() == '1' for k in weekday_columns)
		return cls( row['service_id'], weekdays,
			row.get('start_date') or '', row.get('end_date') or '' )

@u.attr_struct(frozen=True)
class Agency:
	keys = 'id name'

	@classmethod
	def from_row(cls, row): return cls(row.get('agency_id') or '', row.get('agency_name') or '')


@u.attr_struct
class FeedTables:
	'Raw GTFS tables as lists of {column: value} dicts, calendar/agency can be empty.'
	routes = u.attr_init(list)
	trips = u.attr_init(list)
	stops = u.attr_init(list)
	stop_times = u.attr_init(list)
	calendar = u.attr_init(list)
	agency = u.attr_init(list)


### Timetable output

@u.attr_struct(frozen=True)
class ServiceSummary:
	dates = u.attr_init('')
	days = u.attr_init('')

@u.attr_struct(repr=False)
class TimetablePage:
	'''Single printable timetable page.
		"headers" has stop-column label followed by trip labels,
			each of "rows" has stop name followed by time cells aligned with these.
		"service_id" is only set when route has trips with more than one service_id.'''

	keys = ( 'route agency_name headers rows stop_ids'
		' major_stops summary service_id page_index page_count trips' )

	def is_major(self, n):
		return sm.is_major_stop(self.rows[n][0], self.stop_ids[n], self.major_stops)

	@property
	def column_count(self):
		return len(self.rows[0]) if self.rows else (len(self.headers) or 1)

	def __repr__(self):
		return '<TimetablePage {} [{}] {}/{} svc={} trips={} stops={}>'.format(
			self.route.number, self.agency_name, self.page_index, self.page_count,
			self.service_id, len(self.trips), len(self.rows) )
