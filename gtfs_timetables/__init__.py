import itertools as it, operator as op, functools as ft
import time

from . import gtfs, engine, render, summary, index, utils as u, types as t


def calc_timer(func, *args, log=u.get_logger('gtt.timer'), timer_name=None, **kws):
	if not timer_name:
		func_base = func if not isinstance(func, ft.partial) else func.func
		timer_name = '.'.join([func_base.__module__.strip('__'), func_base.__qualname__])
	log.debug('[{}] Starting...', timer_name)
	td = time.monotonic()
	data = func(*args, **kws)
	td = time.monotonic() - td
	log.debug('[{}] Finished in: {:.1f}s', timer_name, td)
	return data


def build_timetables_from_path(
		gtfs_path, conf=None, timer_func=None, log=u.get_logger('gtt.init') ):
	'''Load GTFS feed from directory or zip file and build TimetablePages from it.
		Zip is extracted to a temporary directory, which is removed before returning.'''
	if not conf: conf = engine.TimetableConf()
	load_func = ft.partial(gtfs.load_feed, route_filter=conf.route)
	if timer_func: load_func = ft.partial(timer_func, load_func)
	with gtfs.open_feed(gtfs_path) as gtfs_dir: tables = load_func(gtfs_dir)
	pages = engine.build_timetables(tables, conf, timer_func=timer_func)
	log.debug( 'Built timetables: pages={:,}, routes={:,}',
		len(pages), len(set(page.route.id for page in pages)) )
	return pages


def write_timetables(pages, output_dir, conf=None, log=u.get_logger('gtt.init')):
	'Render all TimetablePages to files in output_dir, yielding (page, paths) tuples.'
	for page in pages:
		paths = render.write_timetable(page, output_dir, conf)
		log.debug('Rendered {!r}: {}', page, ', '.join(map(str, paths)))
		yield page, paths
