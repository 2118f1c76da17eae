import itertools as it, operator as op, functools as ft
import os, re, math, logging, contextlib, tempfile, stat

import attr


class LogMessage:
	def __init__(self, fmt, a, k): self.fmt, self.a, self.k = fmt, a, k
	def __str__(self): return self.fmt.format(*self.a, **self.k) if self.a or self.k else self.fmt

class LogStyleAdapter(logging.LoggerAdapter):
	def __init__(self, logger, extra=None):
		super(LogStyleAdapter, self).__init__(logger, extra or {})
	def log(self, level, msg, *args, **kws):
		if not self.isEnabledFor(level): return
		log_kws = {} if 'exc_info' not in kws else dict(exc_info=kws.pop('exc_info'))
		msg, kws = self.process(msg, kws)
		self.logger._log(level, LogMessage(msg, args, kws), (), log_kws)

get_logger = lambda name: LogStyleAdapter(logging.getLogger(name))


def attr_struct(cls=None, vals_to_attrs=False, defaults=..., **kws):
	if not cls:
		return ft.partial( attr_struct,
			vals_to_attrs=vals_to_attrs, defaults=defaults, **kws )
	try:
		keys = cls.keys
		del cls.keys
	except AttributeError: keys = list()
	else:
		attr_kws = dict()
		if defaults is not ...: attr_kws['default'] = defaults
		if isinstance(keys, str): keys = keys.split()
		for k in keys: setattr(cls, k, attr.ib(**attr_kws))
	if vals_to_attrs:
		for k, v in list(vars(cls).items()):
			if k.startswith('_') or k in keys or callable(v): continue
			setattr(cls, k, attr.ib(v))
	kws.setdefault('slots', True)
	return attr.s(cls, **kws)

def attr_init(factory_or_default=attr.NOTHING, **attr_kws):
	if callable(factory_or_default): factory_or_default = attr.Factory(factory_or_default)
	return attr.ib(default=factory_or_default, **attr_kws)


@contextlib.contextmanager
def safe_replacement(path, *open_args, mode=None, mode_new=None, **open_kws):
	path = str(path)
	if mode is None:
		try: mode = stat.S_IMODE(os.lstat(path).st_mode)
		except OSError: mode = mode_new
	open_kws.update( delete=False,
		dir=os.path.dirname(path), prefix=os.path.basename(path)+'.' )
	if not open_args: open_kws['mode'] = 'w'
	with tempfile.NamedTemporaryFile(*open_args, **open_kws) as tmp:
		try:
			if mode is not None: os.fchmod(tmp.fileno(), mode)
			yield tmp
			if not tmp.closed: tmp.flush()
			os.rename(tmp.name, path)
		finally:
			try: os.unlink(tmp.name)
			except OSError: pass


def umask_file_mode(mode=0o666):
	'Permission bits that open() would give to a new file with current umask.'
	umask = os.umask(0o022)
	os.umask(umask)
	return mode & ~umask


### GTFS clock values

# Hours can be >= 24 for trips running past midnight of their service day,
#  these are kept as-is and sort after same-day times.

def _time_parts(ts_str):
	if not ts_str: return
	parts = ts_str.split(':')
	if len(parts) < 2: return
	parts = list(v.strip() for v in parts)
	if not all(v.isdecimal() for v in parts): return
	return parts

def parse_time(ts_str):
	'Return minute offset for H:MM[:SS] string or None if it cannot be parsed.'
	parts = _time_parts(ts_str)
	if not parts: return
	return int(parts[0]) * 60 + int(parts[1])

def format_time(ts_str):
	'Return zero-padded HH:MM for H:MM[:SS] string or empty string if it cannot be parsed.'
	parts = _time_parts(ts_str)
	if not parts: return ''
	return '{}:{}'.format(*(v.rjust(2, '0') for v in parts[:2]))


def parse_sequence(value):
	'Numeric stop_sequence value as int or float, None if it is not a finite number.'
	try: n = float(str(value).strip())
	except ValueError: return
	if not math.isfinite(n): return
	return int(n) if n.is_integer() else n

sequence_sort_key = lambda n: (n is None, n or 0)


def normalize_stop_value(value):
	if not value: return ''
	return str(value).strip().lower()

def sanitize_file_component(value):
	if not value: return ''
	value = re.sub(r'[\\/:"*?<>|]+', '', str(value).strip())
	value = re.sub(r'_+', '_', re.sub(r'\s+', '_', value))
	return value.strip('_')
