import sys
import traceback

from colorama import Fore, Style, just_fix_windows_console

from errors import TabscriptError, TabscriptSyntaxError, LexicalError
from interpreter import Interpreter
from memory import Memory
from parser import parse, parse_expression


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None

    t = node.__class__.__name__
    d = {"type": t}

    if t in ("Program", "Block"):
        d["statements"] = [ast_to_dict(s) for s in node.statements]
    elif t == "Assign":
        d["name"] = node.name
        d["value"] = ast_to_dict(node.value)
    elif t == "Display":
        d["expr"] = ast_to_dict(node.expr)
    elif t == "Input":
        d["name"] = node.name
    elif t == "If":
        d["branches"] = [
            {"type": "Clause", "keyword": "if" if i == 0 else "elif",
             "condition": ast_to_dict(cond), "body": ast_to_dict(body)}
            for i, (cond, body) in enumerate(node.branches)
        ]
        if node.else_block is not None:
            d["branches"].append({"type": "Clause", "keyword": "else", "body": ast_to_dict(node.else_block)})
    elif t == "While":
        d["condition"] = ast_to_dict(node.condition)
        d["body"] = ast_to_dict(node.body)
    elif t == "For":
        d["var_name"] = node.var_name
        d["start"] = ast_to_dict(node.start_expr)
        d["end"] = ast_to_dict(node.end_expr)
        d["body"] = ast_to_dict(node.body)
    elif t in ("Binary", "Compare"):
        d["op"] = node.op
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif t in ("Negate", "Paren"):
        d["expr"] = ast_to_dict(node.expr)
    elif t == "Number":
        d["value"] = node.value
    elif t == "Var":
        d["name"] = node.name
    else:
        d["raw"] = str(node)

    return d


def pretty(tree, indent=0):
    # One node per line as "Type field=value ...". Child nodes go under a
    # "field:" label; statement and clause lists are nested directly.
    sp = "  " * indent
    fields = [
        f"{k}={v}" for k, v in tree.items()
        if k != "type" and v is not None and not isinstance(v, (dict, list))
    ]
    lines = [" ".join([f"{sp}{tree['type']}", *fields])]
    for key, value in tree.items():
        if isinstance(value, dict):
            lines.append(f"{sp}  {key}:")
            lines.append(pretty(value, indent + 2))
        elif isinstance(value, list):
            lines.extend(pretty(item, indent + 1) for item in value)
    return "\n".join(lines)


def report_error(err, debug=False):
    if debug:
        traceback.print_exc()
        return
    text = str(err)
    if sys.stdout.isatty():
        just_fix_windows_console()
        text = f"{Fore.RED}{text}{Style.RESET_ALL}"
    print(text)


def read_lines(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except OSError as e:
        print(f"Cannot read file \"{path}\": {e.strerror}")
        sys.exit(1)


def cmd_parse(path, debug=False):
    lines = read_lines(path)
    try:
        program = parse(lines)
    except TabscriptError as e:
        report_error(e, debug)
        sys.exit(1)

    try:
        print(pretty(ast_to_dict(program)))
    except RecursionError:
        print("AST is nested too deeply to print")
        sys.exit(1)


def cmd_run(path, debug=False, **options):
    lines = read_lines(path)
    try:
        program = parse(lines)
        Interpreter(**options).run(program, Memory())
    except TabscriptError as e:
        report_error(e, debug)
        sys.exit(1)


def opens_block(stripped):
    # a header whose body starts on the next line
    return stripped.endswith(":")


def cmd_repl(debug=False, **options):
    # One interpreter and one store live across snippets.
    interp = Interpreter(**options)
    memory = Memory()

    print("Tabscript REPL. Type :q to quit, :vars to list variables.")

    buffer_lines = []
    while True:
        prompt = "tab> " if not buffer_lines else "...> "
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        stripped = line.strip()
        if not buffer_lines:
            if stripped in (":q", ":quit", "quit", "exit"):
                break
            if stripped == ":vars":
                for name, value in memory.items():
                    print(f"{name} = {value}")
                continue
            if not stripped:
                continue
            buffer_lines.append(line)
            # Wait for the indented body; a blank line submits it.
            if opens_block(stripped):
                continue
        elif stripped:
            buffer_lines.append(line)
            continue

        lines = buffer_lines
        buffer_lines = []

        try:
            # First, try parsing as a normal program (statements).
            try:
                program = parse(lines)
            except (TabscriptSyntaxError, LexicalError) as parse_err:
                # If that fails, try a single expression and auto-print it.
                if len(lines) != 1:
                    raise
                try:
                    expr = parse_expression(lines[0])
                except TabscriptError:
                    raise parse_err
                print(interp.eval_expr(expr, memory))
                continue

            interp.run(program, memory)
        except TabscriptError as e:
            report_error(e, debug)


USAGE = """Usage:
  tabscript parse <file.tab>
  tabscript run <file.tab>
  tabscript repl
  options: --debug (show Python traceback), --trace, --no-prompt, --max-steps N"""


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)

    debug = False
    if "--debug" in args:
        debug = True
        args.remove("--debug")

    options = {}
    if "--trace" in args:
        options["trace"] = True
        args.remove("--trace")
    if "--no-prompt" in args:
        options["prompts"] = False
        args.remove("--no-prompt")
    if "--max-steps" in args:
        i = args.index("--max-steps")
        try:
            options["max_steps"] = int(args[i + 1])
        except (IndexError, ValueError):
            print("--max-steps expects an integer")
            sys.exit(1)
        del args[i:i + 2]

    if not args:
        print(USAGE)
        sys.exit(1)

    cmd = args[0]

    if cmd == "repl":
        if len(args) != 1:
            print(USAGE)
            sys.exit(1)
        cmd_repl(debug=debug, **options)
        return

    if len(args) != 2:
        print(USAGE)
        sys.exit(1)

    path = args[1]
    if cmd == "parse":
        cmd_parse(path, debug=debug)
    elif cmd == "run":
        cmd_run(path, debug=debug, **options)
    else:
        print(f"Unknown command: {cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
