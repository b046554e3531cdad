import sys

import pytest


# Stand-in for llc: `fake-llc INPUT -o OUTPUT`.
#   - emits one label per `define` and echoes every IR line as a comment
#   - "FAIL_LLC" in the IR: writes partial output, complains on stderr, exits 1
#   - "WARN_LLC": writes full output but prints a warning, exits 0
#   - "NO_OUTPUT": exits 0 without writing anything
#   - "SLEEP_SHORT" / "SLEEP_LONG": delays 0.2 s / 10 s first
FAKE_LLC = r'''
import re
import sys
import time

src = sys.argv[1]
out = sys.argv[sys.argv.index("-o") + 1]
ir = open(src, encoding="utf-8").read()

if "SLEEP_LONG" in ir:
    time.sleep(10)
if "SLEEP_SHORT" in ir:
    time.sleep(0.2)

if "NO_OUTPUT" in ir:
    sys.exit(0)

lines = ["\t.text"]
for name in re.findall(r"define i32 @([\w.]+)\(", ir):
    lines.append("\t.globl\t" + name)
    lines.append(name + ":")
    lines.append("\tretq")
for line in ir.splitlines():
    lines.append("\t# " + line)
asm = "\n".join(lines) + "\n"

if "FAIL_LLC" in ir:
    with open(out, "w", encoding="utf-8") as f:
        f.write(asm[:10])
    sys.stderr.write("fake-llc: " + src + ":1:1: error: expected top-level entity\n")
    sys.exit(1)

with open(out, "w", encoding="utf-8") as f:
    f.write(asm)

if "WARN_LLC" in ir:
    sys.stderr.write("fake-llc: warning: ignoring debug info in " + src + "\n")
'''


@pytest.fixture
def fake_llc(tmp_path):
    path = tmp_path / "fake-llc"
    path.write_text(f"#!{sys.executable}\n{FAKE_LLC}", encoding="utf-8")
    path.chmod(0o755)
    return str(path)


@pytest.fixture
def work_dir(tmp_path):
    d = tmp_path / "work"
    d.mkdir()
    return d
