import itertools as it, operator as op, functools as ft
from pathlib import Path
import os, csv, shutil, zipfile, tempfile, contextlib

from . import utils as u, types as t


log = u.get_logger('gtt.gtfs')


required_files = ['routes', 'trips', 'stops', 'stop_times']
optional_files = ['agency', 'calendar']

class GTFSError(Exception): pass


def check_required_files(gtfs_dir):
	for name in required_files:
		if not (gtfs_dir / '{}.txt'.format(name)).is_file():
			raise GTFSError('Missing required GTFS file: {}.txt'.format(name))

def _rmtree_or_warn(path):
	try: shutil.rmtree(str(path))
	except OSError as err:
		log.warning( 'Unable to remove temporary GTFS'
			' directory ({}): [{}] {}', path, err.__class__.__name__, err )

@contextlib.contextmanager
def open_feed(path):
	'''Context manager that yields GTFS data directory Path for directory or zip file.
		Zip files are extracted to a temporary directory, which is removed on exit.'''
	path = Path(path)
	if path.is_dir():
		check_required_files(path)
		yield path
		return
	if not zipfile.is_zipfile(str(path)):
		raise GTFSError('GTFS input is neither a directory nor a zip file: {}'.format(path))
	tmp_dir = Path(tempfile.mkdtemp(prefix='gtfs-')) # mkdtemp creates it with 0700 mode
	try:
		log.debug('Extracting GTFS zip {} to: {}', path, tmp_dir)
		with zipfile.ZipFile(str(path)) as src: src.extractall(str(tmp_dir))
		check_required_files(tmp_dir)
		yield tmp_dir
	finally: _rmtree_or_warn(tmp_dir)


def iter_gtfs_rows(gtfs_dir, filename, empty_if_missing=False, filter_func=None):
	'''Yield {column: value} dicts for rows in specified GTFS table file.
		Values are stripped, empty lines skipped, short lines padded with empty strings.
		filter_func is applied to each row dict before yielding it, if specified.'''
	log.debug('Processing gtfs file: {}', filename)
	if filename.endswith('.txt'): filename = filename[:-4]
	p = Path(gtfs_dir) / '{}.txt'.format(filename)
	if empty_if_missing and not os.access(str(p), os.R_OK): return
	with p.open(encoding='utf-8-sig', newline='') as src:
		src_csv = csv.reader(src)
		try: fields = list(v.strip() for v in next(src_csv))
		except StopIteration: return
		for line in src_csv:
			if not line or not any(v.strip() for v in line): continue
			if len(line) > len(fields):
				log.debug('Skipping bogus CSV line (file: {}): {!r}', p, line)
				continue
			row = dict(it.zip_longest(fields, (v.strip() for v in line), fillvalue=''))
			if filter_func and not filter_func(row): continue
			yield row


def route_matches(route_filter, route_id, short_name):
	return not route_filter or route_filter in [route_id, short_name]

def load_feed(gtfs_dir, route_filter=None):
	'''Load GTFS tables into FeedTables from directory.
		stop_times are only kept for trips of routes matching route_filter,
			as these are streamed from what can be a very large file.'''
	gtfs_dir, tables = Path(gtfs_dir), t.FeedTables()

	tables.routes = list(iter_gtfs_rows(gtfs_dir, 'routes'))
	tables.trips = list(iter_gtfs_rows(gtfs_dir, 'trips'))
	if not (tables.routes and tables.trips):
		raise GTFSError('GTFS feed is missing route or trip data.')
	tables.agency = list(iter_gtfs_rows(gtfs_dir, 'agency', empty_if_missing=True))
	tables.stops = list(iter_gtfs_rows(gtfs_dir, 'stops'))
	tables.calendar = list(iter_gtfs_rows(gtfs_dir, 'calendar', empty_if_missing=True))

	route_ids = set(
		r.get('route_id') for r in tables.routes
		if route_matches(route_filter, r.get('route_id'), r.get('route_short_name')) )
	trip_ids = set(r.get('trip_id') for r in tables.trips if r.get('route_id') in route_ids)
	if trip_ids:
		tables.stop_times = list(iter_gtfs_rows( gtfs_dir, 'stop_times',
			filter_func=lambda row: row.get('trip_id') in trip_ids ))

	log.debug(
		'Loaded GTFS tables: routes={:,} (selected={:,}), trips={:,} (selected={:,}),'
			' stops={:,}, stop_times={:,}, calendar={:,}, agency={:,}',
		len(tables.routes), len(route_ids), len(tables.trips), len(trip_ids),
		len(tables.stops), len(tables.stop_times), len(tables.calendar), len(tables.agency) )
	return tables
