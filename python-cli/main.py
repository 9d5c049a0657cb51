#!/usr/bin/env python3
"""
cryptoadapter Command Line Interface

Hashing and Diffie-Hellman from the shell.

Usage:
    cryptoadapter hash [OPTIONS]
    cryptoadapter hashes
    cryptoadapter dh-group NAME [OPTIONS]
    cryptoadapter dh-exchange GROUP
    cryptoadapter --version
    cryptoadapter --help
"""

import sys
import os
import argparse
import logging
from typing import BinaryIO

# Add python-core to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'python-core'))

from cryptoadapter import __version__, create_hash, get_diffie_hellman, get_hashes
from cryptoadapter.encoding import encode
from cryptoadapter.errors import CryptoError
from cryptoadapter.groups import GROUP_BITS, group_names

CHUNK_SIZE = 64 * 1024

# Text encodings that print cleanly
OUTPUT_ENCODINGS = ('hex', 'base64', 'base64url')


class CryptoAdapterCLI:
    """Main CLI application for cryptoadapter."""

    def __init__(self, stdin: BinaryIO = None, stdout=None, stderr=None):
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

    def run(self, args: list) -> int:
        """Run the CLI with given arguments."""
        parser = self.create_parser()
        parsed = parser.parse_args(args)

        logging.basicConfig(
            level=logging.DEBUG if parsed.verbose else logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        if hasattr(parsed, 'func'):
            try:
                return parsed.func(parsed)
            except (CryptoError, ValueError, OSError) as e:
                print(f"Error: {e}", file=self.stderr)
                return 1
        else:
            parser.print_help(self.stdout)
            return 0

    def create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="cryptoadapter",
            description="Hashing and Diffie-Hellman key agreement",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    cryptoadapter hash --algorithm sha256 --input file.txt
    cryptoadapter hash -a shake256 --output-length 64 -e base64 < file.txt
    cryptoadapter hashes
    cryptoadapter dh-group modp14 --encoding base64
    cryptoadapter dh-exchange modp15
            """
        )

        parser.add_argument(
            '--version',
            action='version',
            version=f'cryptoadapter v{__version__}'
        )
        parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

        subparsers = parser.add_subparsers(title='commands', dest='command')

        self.add_hash_command(subparsers)
        self.add_hashes_command(subparsers)
        self.add_dh_commands(subparsers)

        return parser

    def add_hash_command(self, subparsers):
        """Add hash command to parser."""
        cmd = subparsers.add_parser('hash', help='Hash a file or stdin')
        cmd.add_argument('--algorithm', '-a', default='sha256', help='Digest algorithm')
        cmd.add_argument('--input', '-i', help='Input file (default: stdin)')
        cmd.add_argument('--encoding', '-e', default='hex', choices=OUTPUT_ENCODINGS, help='Output encoding')
        cmd.add_argument('--output-length', type=int, help='Output length in bytes for SHAKE digests')
        cmd.set_defaults(func=self.handle_hash)

    def add_hashes_command(self, subparsers):
        """Add hashes command to parser."""
        cmd = subparsers.add_parser('hashes', help='List supported digests')
        cmd.set_defaults(func=self.handle_hashes)

    def add_dh_commands(self, subparsers):
        """Add Diffie-Hellman commands to parser."""
        group = subparsers.add_parser('dh-group', help='Show the parameters of a named group')
        group.add_argument('name', choices=group_names(), help='Group name')
        group.add_argument('--encoding', '-e', default='hex', choices=OUTPUT_ENCODINGS, help='Output encoding')
        group.set_defaults(func=self.handle_dh_group)

        exchange = subparsers.add_parser('dh-exchange', help='Run a two-party key agreement')
        exchange.add_argument('group', choices=group_names(), help='Group name')
        exchange.set_defaults(func=self.handle_dh_exchange)

    def _hash_stream(self, stream: BinaryIO, hasher) -> None:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            hasher.write(chunk)
        hasher.end()

    def handle_hash(self, args):
        """Handle hash command."""
        options = {}
        if args.output_length is not None:
            options['output_length'] = args.output_length
        hasher = create_hash(args.algorithm, options)

        if args.input:
            with open(args.input, 'rb') as f:
                self._hash_stream(f, hasher)
        else:
            self._hash_stream(self.stdin, hasher)

        digest = hasher.read()
        print(encode(digest, args.encoding), file=self.stdout)
        return 0

    def handle_hashes(self, args):
        """Handle hashes command."""
        for name in get_hashes():
            print(name, file=self.stdout)
        return 0

    def handle_dh_group(self, args):
        """Handle dh-group command."""
        group = get_diffie_hellman(args.name)
        prime = group.get_prime()
        print(f"prime ({GROUP_BITS[args.name]} bits): {encode(prime, args.encoding)}", file=self.stdout)
        print(f"generator: {int.from_bytes(group.get_generator(), 'big')}", file=self.stdout)
        print(f"verify_error: {group.verify_error}", file=self.stdout)
        return 0

    def handle_dh_exchange(self, args):
        """Handle dh-exchange command."""
        alice = get_diffie_hellman(args.group)
        bob = get_diffie_hellman(args.group)
        alice_public = alice.generate_keys()
        bob_public = bob.generate_keys()

        alice_secret = alice.compute_secret(bob_public)
        bob_secret = bob.compute_secret(alice_public)
        if alice_secret != bob_secret:
            print("Shared secrets differ", file=self.stderr)
            return 1

        print(f"Shared secrets match ({len(alice_secret)} bytes)", file=self.stdout)
        return 0


def main():
    """Main entry point."""
    cli = CryptoAdapterCLI()
    sys.exit(cli.run(sys.argv[1:]))


if __name__ == "__main__":
    main()
