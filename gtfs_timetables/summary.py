# Display metadata for timetable pages - service validity and stop emphasis

from . import utils as u, types as t


day_labels = [ 'Monday', 'Tuesday',
	'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday' ]

every_day_label = 'every day'


def format_date(date_str):
	'Convert YYYYMMDD to DD/MM/YYYY, returning any other value as-is.'
	if not date_str or len(date_str) != 8: return date_str or ''
	return '{}/{}/{}'.format(date_str[6:8], date_str[4:6], date_str[:4])

def format_service_dates(start_date, end_date):
	if not (start_date and end_date and len(start_date) == len(end_date) == 8): return ''
	return 'Valid from {} to {}'.format(*map(format_date, [start_date, end_date]))

def format_service_days(weekdays):
	'''Describe active days from a Monday-first sequence of bools.
		Examples: "every day", "from Monday to Friday", "on Sunday", "Monday, Wednesday".'''
	active = list(n for n, v in enumerate(weekdays) if v)
	if not active: return ''
	if len(active) == len(day_labels): return every_day_label
	consecutive = all(b == a + 1 for a, b in zip(active, active[1:]))
	if consecutive and len(active) > 1:
		return 'from {} to {}'.format(day_labels[active[0]], day_labels[active[-1]])
	if len(active) == 1: return 'on {}'.format(day_labels[active[0]])
	return ', '.join(day_labels[n] for n in active)

def service_summary(sce):
	'Build ServiceSummary for CalendarEntry, or an empty one if there is none.'
	if not sce: return t.ServiceSummary()
	return t.ServiceSummary(
		format_service_dates(sce.start_date, sce.end_date),
		format_service_days(sce.weekdays) )


def is_major_stop(stop_name, stop_id, major_stops=None):
	'''Check if stop should be emphasized in a timetable.
		With non-empty major_stops set of normalized names/ids, only these are matched,
			otherwise all-uppercase stop names are considered to be major ones,
			as some feeds use that convention for interchanges.'''
	if major_stops:
		name, stop_id = map(u.normalize_stop_value, [stop_name, stop_id])
		return bool((name and name in major_stops) or (stop_id and stop_id in major_stops))
	if not stop_name: return False
	name = stop_name.strip()
	return bool(name) and name == name.upper()
