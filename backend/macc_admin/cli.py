#!/usr/bin/env python3
"""CLI for macc_admin. Usage: macc <command> [args]"""

import logging
import sys

from macc_admin.errors import AdminError
from macc_admin.notify import Notification, Notifier
from macc_admin.pages import (
    Dashboard,
    fmt_application,
    fmt_career,
    fmt_career_detail,
    fmt_counts,
    fmt_item,
    fmt_service,
    fmt_user,
)

# Commands reachable without a session
OPEN_COMMANDS = ("login", "forgot", "reset", "serve")


def _parse_flags(args: list[str], flags: dict[str, type]) -> tuple[dict, list[str]]:
    """Parse --flag=value args. Returns (parsed_flags, remaining_args)."""
    parsed = {}
    remaining = []
    for arg in args:
        if arg.startswith("--") and "=" in arg:
            key, val = arg.split("=", 1)
            key = key[2:]  # strip --
            if key in flags:
                parsed[key] = flags[key](val)
            else:
                remaining.append(arg)
        elif arg.startswith("--"):
            key = arg[2:]
            if key in flags and flags[key] is bool:
                parsed[key] = True
            else:
                remaining.append(arg)
        else:
            remaining.append(arg)
    return parsed, remaining


def _bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes", "on")


def _narrow(page, flags: dict) -> None:
    """Apply --search and the dropdown filters to a mounted list page."""
    for name, value in flags.items():
        if name == "search":
            page.search(value)
        else:
            page.set_filter(name, value)


HELP = """Usage: macc <command> [args]

Session:
  login <email> <password>     Sign in (token kept in local storage + cookie)
  logout                       Sign out
  whoami                       Show signed-in profile
  forgot <email>               Send password reset link
  reset <token> <password>     Reset password with emailed token
  passwd <password> [--email=] Change password

Dashboard:
  stats                        Applications, services, careers counts

Services:
  services [--status=]         List sections
    [--search=text]            Match the English title
  services rm <id> [...]       Bulk delete sections
  service add --title_en=...   Create section (--image=path, --isActive=false)
  service edit <id> --k=v      Update section
  service rm <id>              Delete section
  service items <id>           List items of a section
  item add <sid> --title_en=.. Add item (--image=path required)
  item edit <sid> <iid> --k=v  Update item
  item rm <sid> <iid>          Delete item

Careers:
  careers [--department= --location= --status= --search=]
  careers rm <id> [...]        Bulk delete careers
  career get <id>              Show career
  career add --title_en=...    Post career (lists: --responsibilities_en="A\\nB")
  career edit <id> --k=v       Update career
  career toggle <id>           Activate / deactivate
  career rm <id>               Delete career

Applications:
  apps [--job=<career_id>] [--status=Pending|Reviewed|Accepted|Rejected]
    [--search=text]            Match the applicant email
  app get <id>                 Show application
  app status <id> <status>     Set status
  app rm <id>                  Delete application

Users:
  users [--role=] [--status=]  List users
    [--search=text]            Match the email
  users rm <id> [...]          Bulk delete users
  user get <id>                Show user
  user add --userName= --email= --password= [--role=] [--image=]
  user edit <id> --k=v         Update user (blank password = unchanged)
  user rm <id>                 Delete user

Dev:
  serve [--host=] [--port=]    Run the mock backend

Flags: --yes skips confirmation, -v for info logging.
"""


def _echo(note: Notification) -> None:
    prefix = "OK" if note.level == "success" else "ERROR"
    print(f"{prefix}: {note.message}")


def _confirm(prompt: str, yes: bool) -> bool:
    if yes:
        return True
    try:
        return input(f"{prompt} [y/N] ").strip().lower() in ("y", "yes")
    except EOFError:
        return False


def _fill(form, args: list[str]) -> list[str]:
    """Apply --field=value args to a dialog draft. Returns unknown args."""
    unknown = []
    for arg in args:
        if not (arg.startswith("--") and "=" in arg):
            unknown.append(arg)
            continue
        key, val = arg[2:].split("=", 1)
        if key == "image":
            form.select_image(val)
        elif key in form.draft:
            current = form.draft[key]
            if isinstance(current, bool):
                form.set(key, _bool(val))
            elif isinstance(current, int):
                form.set(key, int(val) if val.lstrip("-").isdigit() else val)
            else:
                form.set(key, val.replace("\\n", "\n"))
        else:
            unknown.append(arg)
    return unknown


def _submit(form, args: list[str]) -> None:
    try:
        unknown = _fill(form, args)
    except FileNotFoundError as e:
        print(f"ERROR: {e}")
        return
    if unknown:
        print(f"Unknown fields: {' '.join(unknown)}")
        print(f"Fields: {', '.join(form.draft)}")
        return
    if not form.submit():
        for field, message in form.errors.items():
            print(f"  {field}: {message}")


def _list(page, rows, fmt) -> None:
    print(fmt_counts(page.counts()))
    for row in rows:
        print(fmt(row))


def _bulk_delete(page, ids: list[str], yes: bool) -> None:
    page.mount()
    page.selection.select(*ids)
    targets = page.request_bulk_delete()
    if not targets:
        print(f"No matching {page.label}")
        return
    if not _confirm(f"Delete {len(targets)} {page.label}?", yes):
        page.cancel_bulk_delete()
        return
    page.confirm_bulk_delete()


def _delete(page, id: str, yes: bool) -> None:
    page.request_delete(id)
    if not _confirm(f"Delete {id}?", yes):
        page.cancel_delete()
        return
    page.confirm_delete()


def _find(page, id: str):
    page.mount()
    row = page.find(id)
    if row is None:
        print(f"Not found: {id}")
    return row


def run(dash: Dashboard, cmd: str, rest: list[str], yes: bool = False) -> None:
    if cmd == "login":
        if len(rest) < 2:
            print("Usage: macc login <email> <password>")
            return
        result = dash.sign_in(rest[0], rest[1])
        if result:
            print(f"user: {result.user.get('userName', '-')} | role: {result.user.get('role', '-')}")

    elif cmd == "logout":
        dash.sign_out()

    elif cmd == "whoami":
        user = dash.session.user or {}
        print(f"{user.get('userName', '-')} | {user.get('email', '-')} | {user.get('role', '-')}")

    elif cmd == "forgot":
        if not rest:
            print("Usage: macc forgot <email>")
            return
        dash.forgot_password(rest[0])

    elif cmd == "reset":
        if len(rest) < 2:
            print("Usage: macc reset <token> <new_password>")
            return
        dash.reset_password(rest[0], rest[1])

    elif cmd == "passwd":
        flags, rest = _parse_flags(rest, {"email": str})
        if not rest:
            print("Usage: macc passwd <new_password> [--email=X]")
            return
        dash.change_password(rest[0], email=flags.get("email"))

    elif cmd == "stats":
        s = dash.stats()
        print(f"applications: {s.applications} | services: {s.services} | careers: {s.careers}")

    elif cmd == "services":
        page = dash.services_page()
        if rest and rest[0] == "rm":
            _bulk_delete(page, rest[1:], yes)
            return
        flags, _ = _parse_flags(rest, {"status": str, "search": str})
        page.mount()
        _narrow(page, flags)
        _list(page, page.filtered, fmt_service)

    elif cmd == "service":
        if not rest:
            print("Usage: macc service <add|edit|rm|items> [args]")
            return
        sub, subrest = rest[0], rest[1:]
        page = dash.services_page()
        if sub == "add":
            form = dash.service_form(page)
            form.open()
            _submit(form, subrest)
        elif sub in ("edit", "rm", "items"):
            if not subrest:
                print(f"Usage: macc service {sub} <id>")
                return
            section = _find(page, subrest[0])
            if section is None:
                return
            if sub == "edit":
                form = dash.service_form(page)
                form.open(section)
                _submit(form, subrest[1:])
            elif sub == "rm":
                _delete(page, section.id, yes)
            else:
                print(fmt_service(section))
                for item in sorted(section.services, key=lambda i: i.order):
                    print(f"  {fmt_item(item)}")
        else:
            print(f"Unknown service command: {sub}")

    elif cmd == "item":
        if len(rest) < 2:
            print("Usage: macc item <add|edit|rm> <section_id> [item_id] [--k=v]")
            return
        sub, section_id, subrest = rest[0], rest[1], rest[2:]
        page = dash.services_page()
        section = _find(page, section_id)
        if section is None:
            return
        dialog = dash.service_items(page, section)
        if sub == "add":
            _submit(dialog.add(), subrest)
        elif sub in ("edit", "rm"):
            if not subrest:
                print(f"Usage: macc item {sub} <section_id> <item_id>")
                return
            if sub == "edit":
                try:
                    form = dialog.edit(subrest[0])
                except KeyError as e:
                    print(f"Not found: {e.args[0]}")
                    return
                _submit(form, subrest[1:])
            else:
                dialog.request_delete(subrest[0])
                if not _confirm(f"Delete item {subrest[0]}?", yes):
                    dialog.cancel_delete()
                    return
                dialog.confirm_delete()
        else:
            print(f"Unknown item command: {sub}")

    elif cmd == "careers":
        page = dash.careers_page()
        if rest and rest[0] == "rm":
            _bulk_delete(page, rest[1:], yes)
            return
        flags, _ = _parse_flags(rest, {"department": str, "location": str, "status": str, "search": str})
        page.mount()
        _narrow(page, flags)
        _list(page, page.filtered, fmt_career)

    elif cmd == "career":
        if not rest:
            print("Usage: macc career <get|add|edit|toggle|rm> [args]")
            return
        sub, subrest = rest[0], rest[1:]
        page = dash.careers_page()
        if sub == "add":
            form = dash.career_form(page)
            form.open()
            _submit(form, subrest)
        elif sub in ("get", "edit", "toggle", "rm"):
            if not subrest:
                print(f"Usage: macc career {sub} <id>")
                return
            if sub == "get":
                career = dash.careers.get(subrest[0])
                print(fmt_career_detail(career))
                return
            career = _find(page, subrest[0])
            if career is None:
                return
            if sub == "edit":
                form = dash.career_form(page)
                form.open(career)
                _submit(form, subrest[1:])
            elif sub == "toggle":
                page.toggle(career.id)
            else:
                _delete(page, career.id, yes)
        else:
            print(f"Unknown career command: {sub}")

    elif cmd == "apps":
        flags, _ = _parse_flags(rest, {"job": str, "status": str, "search": str})
        page = dash.applications_page()
        page.mount()
        _narrow(page, flags)
        careers = dash.careers_page()
        careers.mount()
        _list(page, page.resolved(careers.items), fmt_application)

    elif cmd == "app":
        if len(rest) < 2:
            print("Usage: macc app <get|status|rm> <id> [status]")
            return
        sub, id = rest[0], rest[1]
        page = dash.applications_page()
        if sub == "get":
            app = dash.applications.get(id)
            print(fmt_application(app))
            if app.cv:
                print(f"cv: {app.cv.file_url}")
        elif sub == "status":
            if len(rest) < 3:
                print("Usage: macc app status <id> <Pending|Reviewed|Accepted|Rejected>")
                return
            page.mount()
            page.update_status(id, rest[2])
        elif sub == "rm":
            page.mount()
            _delete(page, id, yes)
        else:
            print(f"Unknown app command: {sub}")

    elif cmd == "users":
        page = dash.users_page()
        if rest and rest[0] == "rm":
            _bulk_delete(page, rest[1:], yes)
            return
        flags, _ = _parse_flags(rest, {"role": str, "status": str, "search": str})
        page.mount()
        _narrow(page, flags)
        _list(page, page.filtered, fmt_user)

    elif cmd == "user":
        if not rest:
            print("Usage: macc user <get|add|edit|rm> [args]")
            return
        sub, subrest = rest[0], rest[1:]
        page = dash.users_page()
        if sub == "add":
            form = dash.user_form(page)
            form.open()
            _submit(form, subrest)
        elif sub in ("get", "edit", "rm"):
            if not subrest:
                print(f"Usage: macc user {sub} <id>")
                return
            if sub == "get":
                print(fmt_user(dash.users.get(subrest[0])))
                return
            user = _find(page, subrest[0])
            if user is None:
                return
            if sub == "edit":
                form = dash.user_form(page)
                form.open(user)
                _submit(form, subrest[1:])
            else:
                _delete(page, user.id, yes)
        else:
            print(f"Unknown user command: {sub}")

    elif cmd == "serve":
        flags, _ = _parse_flags(rest, {"host": str, "port": int})
        from server.app import run as serve
        serve(host=flags.get("host", "127.0.0.1"), port=flags.get("port", 8080))

    else:
        print(f"Unknown command: {cmd}")
        print("Run 'macc help' for usage.")


def main():
    args = sys.argv[1:]
    if not args or args[0] in ("-h", "--help", "help"):
        print(HELP.strip())
        return

    verbose = "-v" in args
    yes = "--yes" in args
    args = [a for a in args if a not in ("-v", "--yes")]
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if not args:
        print(HELP.strip())
        return
    cmd, rest = args[0], args[1:]

    dash = Dashboard(notifier=Notifier(sink=_echo))
    if cmd in OPEN_COMMANDS:
        run(dash, cmd, rest, yes)
        return

    def redirect(url: str) -> None:
        print(f"Not signed in. Log in first: macc login <email> <password> ({url})")
        sys.exit(1)

    try:
        dash.guard(redirect).mount(lambda: run(dash, cmd, rest, yes))
    except AdminError as e:
        print(f"ERROR: {getattr(e, 'message', None) or e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
