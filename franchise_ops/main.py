import argparse
import sys
from datetime import datetime

from franchise_ops.db import db, session_scope
from franchise_ops.exceptions import FranchiseOpsError
from franchise_ops.logging_setup import logger, get_logger, log_exception

def init_application():
    """Initialize application components."""
    engine = db.engine

    log = logger.app_logger
    log.info("Franchise Operations initialized")
    log.info(f"Using database backend: {engine.dialect.name}")

    return True

def _parse_date(value):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")

def process_purchase_order(args):
    """Process one purchase order from the command line.

    Args:
        args: Command-line arguments with po_no, material_id, quantity and date
    """
    from franchise_ops.services.purchase_order_service import PurchaseOrderService

    log = get_logger('purchase_orders')
    log.info(f"Processing purchase order {args.po_no} for material {args.material_id}")

    result = PurchaseOrderService(db).process_purchase_order(
        args.po_no,
        args.material_id,
        args.quantity,
        po_date=args.date
    )

    print(f"{result['po_no']}: {result['state']}, {result['material_id']} now at {result['new_quantity']} units")
    return result

def record_shipment(args):
    """Record a shipment, reserving stock for it.

    Args:
        args: Command-line arguments with tracking_id and material_id
    """
    from franchise_ops.services.shipment_service import ShipmentService

    log = get_logger('shipments')

    with session_scope() as session:
        shipment = ShipmentService(session).record_shipment(args.tracking_id, args.material_id)
        remaining = shipment.material.quantity

    log.info(f"Shipment {args.tracking_id} committed")
    print(f"Shipment {args.tracking_id} recorded, {remaining} units of {args.material_id} left")
    return shipment

def run_report(args):
    """Run a named report and print it.

    Args:
        args: Command-line arguments with report name and output format
    """
    from franchise_ops.services.reporting_service import ReportingService

    log = get_logger('reports')

    with session_scope() as session:
        service = ReportingService(session)
        rows = service.run_report(args.name)

    log.info(f"Report {args.name} produced {len(rows)} rows")
    print(ReportingService.export_report(rows, args.format))
    return rows

def build_parser():
    """Build the command-line parser."""
    from franchise_ops.services.reporting_service import ReportingService

    parser = argparse.ArgumentParser(prog='franchise-ops', description='Franchise Operations')

    parser.add_argument('--setup-db', action='store_true',
                        help='Set up the database schema')
    parser.add_argument('--drop-db', action='store_true',
                        help='Drop existing tables before setup')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    po_parser = subparsers.add_parser('process-po', help='Process a raw material purchase order')
    po_parser.add_argument('po_no', help='Purchase order number')
    po_parser.add_argument('material_id', help='Material being purchased')
    po_parser.add_argument('quantity', type=int, help='Units purchased')
    po_parser.add_argument('--date', type=_parse_date, help='Purchase order date (YYYY-MM-DD), defaults to today')

    shipment_parser = subparsers.add_parser('record-shipment', help='Record a raw material shipment')
    shipment_parser.add_argument('tracking_id', help='Shipment tracking ID')
    shipment_parser.add_argument('material_id', help='Material being shipped')

    report_parser = subparsers.add_parser('report', help='Run a franchise performance report')
    report_parser.add_argument('name', choices=sorted(ReportingService.REPORTS), help='Report name')
    report_parser.add_argument('--format', choices=['csv', 'json'], default='csv',
                               help='Output format')

    return parser

COMMANDS = {
    'process-po': process_purchase_order,
    'record-shipment': record_shipment,
    'report': run_report
}

def main(argv=None):
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.setup_db:
        from franchise_ops.scripts.setup_db import setup_database
        if not setup_database(args.drop_db):
            sys.exit(1)
        return

    if args.command is None:
        parser.print_help()
        return

    try:
        init_application()
        COMMANDS[args.command](args)
    except FranchiseOpsError as e:
        log_exception('cli', e, f"{args.command} failed")
        print(str(e), file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
