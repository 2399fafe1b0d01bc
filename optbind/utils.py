from boltons.iterutils import unique


_QUOTE_CHARS = ('"', "'")


def process_keys(keys):
    """Validate and canonicalize the key names passed to an Option,
    generally on construction.

    Accepts any number of strings, each of which may hold several keys
    separated by ``|``. Surrounding whitespace is trimmed and blank keys
    are dropped. A key with a leading ``+`` marks the key to be used in
    generated parameter files.

    Returns a tuple of (keys, output_key).
    """
    ret, output_key = [], None
    for key in keys:
        if not isinstance(key, str):
            raise TypeError('expected option key strings, not: %r' % (key,))
        for part in key.split('|'):
            part = part.strip()
            is_output = part.startswith('+')
            part = part.lstrip(' +').strip()
            if not part:
                continue
            if is_output and output_key is None:
                output_key = part
            ret.append(part)
    if not ret:
        raise ValueError('expected at least one non-blank option key, not: %r' % (keys,))
    return tuple(ret), output_key or ret[0]


def is_blank(text):
    return text is None or not text.strip()


def strip_quotes(text):
    "Remove one pair of matching single or double quotes around *text*."
    if len(text) >= 2 and text[0] in _QUOTE_CHARS and text[-1] == text[0]:
        return text[1:-1]
    return text


def get_type_name(parse_as):
    try:
        return parse_as.__name__
    except AttributeError:
        return repr(parse_as)


def format_nonexp_repr(obj, req_names=None, opt_names=None, opt_key=None):
    """Format a non-expression-style repr

    Some object reprs look like object instantiation, e.g., App(r=[], mw=[]).

    This makes sense for smaller, lower-level objects whose state
    roundtrips. But a lot of objects contain values that don't
    roundtrip, like types and functions.

    For those objects, there is the non-expression style repr, which
    mimic's Python's default style to make a repr like this:

    <Option keys=('start',) parse_as=<class 'int'>>
    """
    cn = obj.__class__.__name__
    req_names = req_names or []
    opt_names = opt_names or []
    all_names = unique(req_names + opt_names)

    if opt_key is None:
        opt_key = lambda v: v is None
    assert callable(opt_key)

    items = [(name, getattr(obj, name, None)) for name in all_names]
    labels = ['%s=%r' % (name, val) for name, val in items
              if not (name in opt_names and opt_key(val))]
    if not labels:
        labels = ['id=%s' % id(obj)]
    ret = '<%s %s>' % (cn, ' '.join(labels))
    return ret
