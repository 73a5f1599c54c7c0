import shlex

# Shown in transcript headers and the run log in place of a password.
MASK = "********"


def render_command(template, **values):
    # Every substituted value is shell-quoted; templates supply the rest verbatim.
    return template.format(**{k: shlex.quote(str(v)) for k, v in values.items()})
