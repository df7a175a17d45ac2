"""

Command line utility to put JSON Schema definitions into an OpenAPI 3.0 document.

"""


import argparse
import logging
import tempfile
import sys
import os
import json
from jsonschema2openapi import _version

ARG_TYPES = {'str': str, 'int': int, 'bool': bool}

def load_commands():
    """Load the commands from the commands.json file."""
    commands_path = os.path.join(os.path.dirname(__file__), 'commands.json')
    with open(commands_path, 'r', encoding='utf-8') as f:
        return json.load(f)

def create_subparsers(subparsers, commands):
    """Create subparsers for the commands."""
    for command in commands:
        cmd_parser = subparsers.add_parser(command['command'], help=command['description'])
        for arg in command['args']:
            kwargs = {
                'type': ARG_TYPES[arg['type']],
                'help': arg['help'],
            }

            if 'nargs' in arg:
                kwargs['nargs'] = arg['nargs']
            if 'choices' in arg:
                kwargs['choices'] = arg['choices']
            if 'default' in arg:
                kwargs['default'] = arg['default']
            if arg['type'] == 'bool':
                kwargs['action'] = 'store_true'
                del kwargs['type']
            carg = cmd_parser.add_argument(arg['name'], **kwargs)
            if arg['name'].startswith('-'):
                carg.required = arg.get('required', True)

def dynamic_import(module, func):
    """Dynamically import a module and function."""
    mod = __import__(module, fromlist=[func])
    return getattr(mod, func)

def main():
    """Main function for the command line utility."""
    commands = load_commands()
    parser = argparse.ArgumentParser(description='Put JSON Schema definitions into an OpenAPI 3.0 document.')
    parser.add_argument('--version', action='store_true', help='Print the version of jsonschema2openapi.')
    parser.add_argument('--verbose', action='store_true', help='Log the translation steps to stderr.')

    subparsers = parser.add_subparsers(dest='command')
    create_subparsers(subparsers, commands)

    args = parser.parse_args()

    if 'version' in args and args.version:
        print(f'jsonschema2openapi {_version.version}')
        return

    if args.command is None:
        parser.print_help()
        return

    if getattr(args, 'verbose', False):
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    temp_input = None
    temp_output = None
    try:
        command = next((cmd for cmd in commands if cmd['command'] == args.command), None)
        if not command:
            print(f"Error: Command {args.command} not found.")
            sys.exit(1)

        input_file_path = getattr(args, 'input', None)
        if input_file_path is None:
            temp_input = tempfile.NamedTemporaryFile(delete=False, mode='w', encoding='utf-8')
            input_file_path = temp_input.name
            temp_input.write(sys.stdin.read())
            temp_input.flush()
            temp_input.close()

        output_file_path = getattr(args, 'out', None)
        if output_file_path is None:
            temp_output = tempfile.NamedTemporaryFile(delete=False)
            temp_output.close()
            output_file_path = temp_output.name
        else:
            print(f'Executing {command["description"]} with input {input_file_path} and output {output_file_path}', file=sys.stderr)

        module_name, func_name = command['function']['name'].rsplit('.', 1)
        func = dynamic_import(module_name, func_name)
        func_args = {}
        for arg in command['function']['args']:
            val = command['function']['args'][arg]
            if val == 'input_file_path':
                func_args[arg] = input_file_path
            elif val == 'output_file_path':
                func_args[arg] = output_file_path
            elif val.startswith('args.'):
                if hasattr(args, val[5:]):
                    func_args[arg] = getattr(args, val[5:])
            else:
                func_args[arg] = val
        func(**func_args)

        if temp_output:
            with open(output_file_path, 'r', encoding='utf-8') as f:
                sys.stdout.write(f.read())
                sys.stdout.write('\n')

    except Exception as e:  # pylint: disable=broad-except
        print("Error: ", str(e))
        sys.exit(1)
    finally:
        for temp_file in (temp_input, temp_output):
            if temp_file:
                try:
                    os.remove(temp_file.name)
                except OSError as e:
                    print(f"Error: Could not delete temporary file {temp_file.name}. {e}")

if __name__ == "__main__":
    main()
