import itertools as it, operator as op, functools as ft
import sys

from . import gtfs, engine, render, utils as u
from . import calc_timer, build_timetables_from_path, write_timetables


def conf_value(k, v):
	'Return normalized --conf override value or raise ValueError if it is not valid for the key.'
	is_int = lambda v: isinstance(v, int) and not isinstance(v, bool)
	is_num = lambda v: is_int(v) or isinstance(v, float)
	if k == 'route':
		if v is None or isinstance(v, str): return v
		if is_int(v): return str(v)
	elif k == 'max_trips':
		if is_int(v) and v > 0: return v
	elif k == 'major_stops':
		if isinstance(v, str): v = v.split(',')
		if isinstance(v, list) and all(isinstance(s, str) or is_int(s) for s in v):
			return frozenset(filter(None, map(u.normalize_stop_value, v)))
	elif k == 'stop_label':
		if isinstance(v, str): return v
	elif k == 'stop_order':
		if v in engine.stop_orders: return v
	elif k == 'formats':
		if isinstance(v, str): v = [v]
		if isinstance(v, list) and v\
				and all(fmt in render.output_formats for fmt in v): return tuple(v)
	elif k.startswith('pdf_'):
		if is_num(v) and v > 0: return v
	raise ValueError(v)


def main(args=None):
	conf = engine.TimetableConf()
	conf_render = render.RenderConf()

	import argparse
	parser = argparse.ArgumentParser(
		description='Convert GTFS feed into printable HTML/PDF route timetables.')
	parser.add_argument('-i', '--input', metavar='path', required=True,
		help='Path to GTFS zip file or extracted directory with GTFS *.txt files.')
	parser.add_argument('-o', '--output', metavar='dir', default='output',
		help='Output directory for HTML/PDF files. Default: %(default)s')

	group = parser.add_argument_group('Timetable options')
	group.add_argument('-r', '--route', metavar='route_id_or_short_name',
		help='Only render a specific route, matched by route_id or route_short_name.')
	group.add_argument('--max-trips', type=int, metavar='n', default=conf.max_trips,
		help='Maximum number of trips (columns) to include per timetable page.'
			' Trips of the same route and service are split into multiple pages by that.'
			' Default: %(default)s')
	group.add_argument('--major-stops', metavar='id-or-name-list',
		help='Comma-separated stop IDs or names to emphasize as major stops.'
			' Without this option, all stops with uppercase names are emphasized.')

	group = parser.add_argument_group('Output options')
	group.add_argument('-f', '--format', action='append', choices=render.output_formats,
		help='Output format(s) to produce, can be specified multiple times.'
			' Default is to produce both HTML and PDF files for every timetable page.')

	group = parser.add_argument_group('Misc/debug options')
	group.add_argument('--conf', metavar='yaml-data',
		help='Override values for TimetableConf or RenderConf as a YAML mapping.'
			' Example: {stop_label: Stops, stop_order: page, pdf_row_height: 12}')
	group.add_argument('--debug', action='store_true', help='Verbose operation mode.')

	opts = parser.parse_args(sys.argv[1:] if args is None else args)

	u.logging.basicConfig(
		format='%(asctime)s :: %(name)s %(levelname)s :: %(message)s',
		datefmt='%Y-%m-%d %H:%M:%S',
		level=u.logging.DEBUG if opts.debug else u.logging.WARNING )
	log = u.get_logger('gtt.main')

	if opts.max_trips <= 0:
		parser.error('Invalid value for --max-trips; expected a positive integer.')
	conf.route, conf.max_trips = opts.route, opts.max_trips
	if opts.major_stops:
		conf.major_stops = frozenset(filter( None,
			map(u.normalize_stop_value, opts.major_stops.split(',')) ))
	if opts.format: conf_render.formats = tuple(opts.format)
	if opts.conf:
		import yaml
		conf_over = yaml.safe_load(opts.conf) or dict()
		if not isinstance(conf_over, dict):
			parser.error('--conf value must be a YAML mapping, not: {!r}'.format(conf_over))
		for k, v in conf_over.items():
			for c in conf, conf_render:
				if k not in u.attr.fields_dict(type(c)): continue
				try: setattr(c, k, conf_value(k, v))
				except ValueError:
					parser.error('Invalid value for conf option {!r}: {!r}'.format(k, v))
				break
			else: parser.error('Unrecognized conf option: {!r} (value: {!r})'.format(k, v))

	timer_func = calc_timer if opts.debug else None
	try:
		pages = build_timetables_from_path(opts.input, conf, timer_func=timer_func)
		for page, paths in write_timetables(pages, opts.output, conf_render):
			print('Generated {}'.format(' and '.join(map(str, paths))), flush=True)
	except gtfs.GTFSError as err:
		log.debug('Aborting on error: [{}] {}', err.__class__.__name__, err)
		print('Error: {}'.format(err), file=sys.stderr)
		return 1

