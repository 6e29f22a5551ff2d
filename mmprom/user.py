"""User name lookup."""
import pwd


def by_uid(uid):
    """Return the user name for ``uid``, or ``uid`` itself if there is none."""
    try:
        return pwd.getpwuid(int(uid)).pw_name
    except (KeyError, ValueError):
        return str(uid)
