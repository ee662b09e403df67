#!/usr/bin/env python3
"""
CLI tool to build and test WhatsApp automations.

Automations are kept in the local studio store (STUDIO_STORE_PATH) and replies
are generated and sent through the running API (STUDIO_API_URL).

Usage:
    python -m app.cli.automations list
    python -m app.cli.automations create --name "Pricing" --trigger "price" --goal "Book a demo"
    python -m app.cli.automations regenerate --id <automation_id>
    python -m app.cli.automations edit --id <automation_id> --phone +14155551234
    python -m app.cli.automations send --id <automation_id>
    python -m app.cli.automations delete --id <automation_id>
    python -m app.cli.automations export

Examples:
    # Create an automation with context for the AI
    python -m app.cli.automations create --name "New Lead Capture" --trigger "pricing" \\
        --goal "Move the user to schedule a demo" --tone professional \\
        --context "Starter ($29), Growth ($99). Demo link: https://cal.com/team/demo"

    # Replace the generated reply by hand
    python -m app.cli.automations edit --id <automation_id> --message "Hi! Our plans start at $29."

    # Copy the store into the webhook configuration
    export AUTOMATION_FLOWS="$(python -m app.cli.automations export)"
"""
import argparse
import asyncio
import json
import sys
from typing import Optional

import httpx

from app.application.automation_builder import AutomationBuilder, AutomationBuilderError
from app.clients.studio_client import StudioAPIClient
from app.config import settings
from app.domain.automation import AutomationFlow, FlowStatus, Tone
from app.infrastructure.automation_store import AutomationStore
from app.infrastructure.json_storage import JsonFileStorage


def _load_store(store_path: Optional[str] = None) -> AutomationStore:
    store = AutomationStore(JsonFileStorage(store_path or settings.studio_store_path))
    store.load()
    return store


def _print_flow(flow: AutomationFlow) -> None:
    status = "sending test..." if flow.status == FlowStatus.SENDING else flow.status.value
    print(f"[{status.upper()}] {flow.name}  (id: {flow.id})")
    print(f"  Trigger: {flow.trigger_phrase}")
    print(f"  Tone: {flow.ai_tone.value}")
    if flow.test_phone:
        print(f"  Test number: {flow.test_phone}")
    if flow.last_generated_at:
        print(f"  Generated: {flow.last_generated_at.isoformat()}")
    if flow.error:
        print(f"  Error: {flow.error}")
    if flow.message_preview:
        print("  Message:")
        for line in flow.message_preview.splitlines():
            print(f"    {line}")


async def _run_with_builder(action, api_url: Optional[str], store_path: Optional[str]):
    store = _load_store(store_path)
    async with httpx.AsyncClient() as http_client:
        builder = AutomationBuilder(store, StudioAPIClient(http_client, api_url or settings.studio_api_url))
        return await action(builder)


def list_automations(store_path: Optional[str] = None) -> None:
    """List stored automations"""
    store = _load_store(store_path)
    flows = store.list()

    if not flows:
        print("No automations yet. Create one with: python -m app.cli.automations create --help")
        return

    ready = sum(1 for flow in flows if flow.status == FlowStatus.READY)
    drafts = sum(1 for flow in flows if flow.status == FlowStatus.DRAFT)
    print(f"{len(flows)} automation(s): {ready} ready, {drafts} drafts\n")
    for flow in flows:
        _print_flow(flow)
        print()


async def create_automation(args) -> int:
    async def action(builder: AutomationBuilder):
        return await builder.create(
            name=args.name,
            trigger_phrase=args.trigger,
            goal=args.goal,
            tone=Tone(args.tone),
            context=args.context,
        )

    try:
        flow = await _run_with_builder(action, args.api_url, args.store)
    except AutomationBuilderError as e:
        print(f"[ERROR] {e.message}")
        return 1

    print(f"[SUCCESS] Automation '{flow.name}' created")
    _print_flow(flow)
    return 0


async def regenerate_automation(args) -> int:
    try:
        flow = await _run_with_builder(lambda b: b.regenerate(args.id), args.api_url, args.store)
    except AutomationBuilderError as e:
        print(f"[ERROR] {e.message}")
        return 1

    _print_flow(flow)
    return 0 if flow.status == FlowStatus.READY else 1


async def send_automation(args) -> int:
    try:
        flow = await _run_with_builder(lambda b: b.send_test(args.id), args.api_url, args.store)
    except AutomationBuilderError as e:
        print(f"[ERROR] {e.message}")
        return 1

    if flow.status == FlowStatus.ERROR:
        print(f"[ERROR] {flow.error}")
        return 1
    print(f"[SUCCESS] Test message sent to {flow.test_phone}")
    return 0


def edit_automation(args) -> int:
    changes = {}
    if args.message is not None:
        changes["message_preview"] = args.message
    if args.phone is not None:
        changes["test_phone"] = args.phone
    if args.name is not None:
        changes["name"] = args.name

    if not changes:
        print("[ERROR] Nothing to edit. Pass --message, --phone or --name")
        return 1

    store = _load_store(args.store)
    builder = AutomationBuilder(store)
    try:
        flow = builder.update(args.id, **changes)
    except AutomationBuilderError as e:
        print(f"[ERROR] {e.message}")
        return 1

    print(f"[SUCCESS] Automation '{flow.name}' updated")
    return 0


def delete_automation(args) -> int:
    store = _load_store(args.store)
    builder = AutomationBuilder(store)
    try:
        builder.delete(args.id)
    except AutomationBuilderError as e:
        print(f"[ERROR] {e.message}")
        return 1

    print(f"[SUCCESS] Automation {args.id} deleted")
    return 0


def export_automations(store_path: Optional[str] = None, only_ready: bool = False) -> None:
    """Print the store as a compact JSON array (the AUTOMATION_FLOWS format)"""
    flows = _load_store(store_path).list()
    if only_ready:
        flows = [flow for flow in flows if flow.status == FlowStatus.READY]
    print(json.dumps([flow.to_wire() for flow in flows], ensure_ascii=False, separators=(",", ":")))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Build and test WhatsApp automations',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--store', help='Path to the studio store file (default: STUDIO_STORE_PATH)')
    parser.add_argument('--api-url', help='Studio API base URL (default: STUDIO_API_URL)')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # List command
    subparsers.add_parser('list', help='List automations')

    # Create command
    create_parser = subparsers.add_parser('create', help='Generate a reply and create an automation')
    create_parser.add_argument('--name', required=True, help='Automation name')
    create_parser.add_argument('--trigger', required=True, help='Trigger phrase matched in inbound messages')
    create_parser.add_argument('--goal', required=True, help='Goal for the AI agent')
    create_parser.add_argument(
        '--tone',
        default=Tone.FRIENDLY.value,
        choices=[tone.value for tone in Tone],
        help='Tone & personality'
    )
    create_parser.add_argument('--context', help='Customer context / knowledge base excerpt')

    # Regenerate command
    regenerate_parser = subparsers.add_parser('regenerate', help='Regenerate the reply for an automation')
    regenerate_parser.add_argument('--id', required=True, help='Automation ID')

    # Edit command
    edit_parser = subparsers.add_parser('edit', help='Edit an automation')
    edit_parser.add_argument('--id', required=True, help='Automation ID')
    edit_parser.add_argument('--message', help='Replace the reply text')
    edit_parser.add_argument('--phone', help='Test WhatsApp number, e.g. whatsapp:+14155551234')
    edit_parser.add_argument('--name', help='Rename the automation')

    # Send command
    send_parser = subparsers.add_parser('send', help='Send the reply to the test number')
    send_parser.add_argument('--id', required=True, help='Automation ID')

    # Delete command
    delete_parser = subparsers.add_parser('delete', help='Delete an automation')
    delete_parser.add_argument('--id', required=True, help='Automation ID')

    # Export command
    export_parser = subparsers.add_parser('export', help='Print automations as an AUTOMATION_FLOWS value')
    export_parser.add_argument('--ready-only', action='store_true', help='Only export ready automations')

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Execute command
    if args.command == 'list':
        list_automations(args.store)
        return 0
    elif args.command == 'create':
        return asyncio.run(create_automation(args))
    elif args.command == 'regenerate':
        return asyncio.run(regenerate_automation(args))
    elif args.command == 'edit':
        return edit_automation(args)
    elif args.command == 'send':
        return asyncio.run(send_automation(args))
    elif args.command == 'delete':
        return delete_automation(args)
    elif args.command == 'export':
        export_automations(args.store, args.ready_only)
        return 0
    return 1


if __name__ == '__main__':
    sys.exit(main())
