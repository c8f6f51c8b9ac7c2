# Overview: Operator CLI for the register backend (setup, staff, stock, shifts, reports).

# backend/sellespro/cli.py
# Usage: FLASK_APP=sellespro flask <group> <command> [options]
#
#   system init                     create the snapshot table; seed on first run
#   system reset-db --yes           wipe everything and start from the seed (dev only)
#   users list                      staff accounts and roles
#   users create --role USER        add a cashier or manager (prompts for name/password)
#   products list [--low-stock]     catalog with stock counts
#   shifts status                   who holds the register right now
#   shifts close --yes              release a shift left open at close of day
#   reports summary --timeframe week --shift A

import click
from flask.cli import with_appcontext

from .extensions import db, state_store
from .errors import PosError
from .models import Role
from .money_utils import money_to_json
from .services import auth_service, products_service, reporting_service, shift_service
from .services.snapshot_service import read_snapshot, save_state, seed_state
from .time_utils import to_utc_z


@click.group('system')
def system_group():
    """Install and reset."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Prepare a fresh install.

    Safe to re-run: a stored snapshot is left alone. On an empty database
    the three demo products and the admin/cashier1 accounts are written,
    all with the password "password".
    """
    click.echo("START Initializing Sellespro...")

    db.create_all()
    click.echo("PASS Snapshot table ready")

    if read_snapshot() is not None:
        state = state_store.state
        click.echo(f"PASS Using existing snapshot: {len(state.products)} products, "
                   f"{len(state.users)} users, {len(state.sales)} sales")
        return

    state = seed_state()
    save_state(state)
    state_store.reload()
    click.echo(f"PASS Seeded {len(state.products)} products and {len(state.users)} users")

    click.echo("\nDemo logins (rotate before real use):")
    click.echo("   admin    -> MANAGER / password")
    click.echo("   cashier1 -> USER    / password")
    click.echo("")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """Drop every table and come back up on the seed data. Sales history is lost."""
    if not yes:
        click.confirm("WARN Every product, account and sale will be erased. Continue?", abort=True)

    click.echo("DROP  Removing tables...")
    db.drop_all()

    click.echo("BUILD  Recreating schema...")
    db.create_all()

    state = state_store.reload()
    state_store.flush()
    click.echo(f"PASS Database reset complete ({len(state.products)} products, {len(state.users)} users).")


# =============================================================================
# USER MANAGEMENT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """Staff accounts."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all staff accounts with their roles."""
    users = state_store.state.users

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*60)
    click.echo(f"{'ID':<20} {'Username':<20} {'Role'}")
    click.echo("="*60)

    for user in users:
        marker = " (bootstrap)" if user.is_bootstrap else ""
        click.echo(f"{user.id:<20} {user.username:<20} {user.role.value}{marker}")

    click.echo("="*60 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice([r.value for r in Role]), default=Role.USER.value, show_default=True)
@with_appcontext
def create_user_cli(username, password, role):
    """Create a staff account."""
    try:
        user = state_store.apply(auth_service.create_user, username, password, role)
    except PosError as e:
        click.echo(f"FAIL {e.message}")
        return

    state_store.flush()
    click.echo(f"PASS Created user: {user.username} ({user.role.value}, ID: {user.id})")


# =============================================================================
# CATALOG COMMANDS
# =============================================================================

@click.group('products')
def products_group():
    """Catalog inspection commands."""


@products_group.command('list')
@click.option('--low-stock', is_flag=True, help='Only products below the low-stock threshold')
@with_appcontext
def list_products(low_stock):
    """List products with stock counts."""
    products = list(products_service.search_products(state_store.state.products, low_stock_only=low_stock))

    if not products:
        click.echo("No products found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<18} {'Name':<24} {'Code':<10} {'Barcode':<12} {'Qty':>6} {'Price':>10}")
    click.echo("="*80)

    for p in products:
        flag = "  LOW" if p.is_low_stock else ""
        click.echo(f"{p.id:<18} {p.name:<24} {p.local_code:<10} {p.bar_code or '-':<12} "
                   f"{p.quantity:>6} {p.price:>10}{flag}")

    click.echo("="*80 + "\n")


# =============================================================================
# SHIFT COMMANDS
# =============================================================================

@click.group('shifts')
def shifts_group():
    """Shift inspection and repair commands."""


@shifts_group.command('status')
@with_appcontext
def shift_status():
    """Show the active shift."""
    state = state_store.state
    active = state.active_shift
    if active is None:
        click.echo("No active shift.")
        return

    operator = state.find_user(active.user_id)
    name = operator.username if operator else active.user_id
    click.echo(f"Active shift {active.id}: type {active.type.value}, "
               f"opened by {name} at {to_utc_z(active.start_time)}")


@shifts_group.command('close')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def close_shift(yes):
    """Force-close the active shift (e.g. after a terminal crash)."""
    if not yes:
        click.confirm("WARN Close the active shift?", abort=True)

    try:
        shift = state_store.apply(shift_service.deactivate_shift)
    except PosError as e:
        click.echo(f"FAIL {e.message}")
        return

    state_store.flush()
    click.echo(f"PASS Closed shift {shift.id} at {to_utc_z(shift.end_time)}")


# =============================================================================
# REPORTING COMMANDS
# =============================================================================

@click.group('reports')
def reports_group():
    """Sales reporting commands."""


@reports_group.command('summary')
@click.option('--timeframe', type=click.Choice(reporting_service.TIMEFRAMES), default='today', show_default=True)
@click.option('--shift', 'shift_filter', type=click.Choice(['ALL', 'A', 'B']), default='ALL', show_default=True)
@with_appcontext
def summary_cli(timeframe, shift_filter):
    """Print the store-wide sales summary."""
    state = state_store.state
    summary = reporting_service.summarize_sales(
        state.sales,
        state.products,
        timeframe=timeframe,
        shift_filter=shift_filter,
    )
    click.echo(f"Timeframe:          {timeframe} (shift {shift_filter})")
    click.echo(f"Total revenue:      {money_to_json(summary.total_revenue):.2f}")
    click.echo(f"Top item:           {summary.top_item or '-'} ({summary.top_item_quantity})")
    click.echo(f"Transaction volume: {summary.transaction_volume}")
    click.echo(f"Low stock items:    {summary.low_stock_count}")


def register_commands(app):
    """Attach the command groups to the app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(products_group)
    app.cli.add_command(shifts_group)
    app.cli.add_command(reports_group)
