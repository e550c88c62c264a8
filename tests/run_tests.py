#!/usr/bin/env python
"""
测试运行脚本

用法:
    python tests/run_tests.py               # 只运行单元测试（默认）
    python tests/run_tests.py --integration # 只运行集成测试，需要 DIFY_BASE_URL / DIFY_API_KEY
    python tests/run_tests.py --all         # 运行全部测试
    python tests/run_tests.py --cov         # 单元测试 + dify_sdk 覆盖率报告
"""
import sys
import subprocess
from pathlib import Path

BASE_CMD = ["pytest", "tests/"]

MODES = {
    "--unit": ("单元测试", ["-m", "unit"]),
    "--integration": ("集成测试 (需要真实API Key)", ["-m", "integration"]),
    "--all": ("所有测试", []),
    "--cov": (
        "单元测试并生成覆盖率报告",
        ["-m", "unit", "--cov=dify_sdk", "--cov-report=html", "--cov-report=term"],
    ),
}


def main():
    args = sys.argv[1:] or ["--unit"]
    mode = args[0]
    if mode not in MODES:
        print(__doc__)
        return 1

    title, extra = MODES[mode]
    print("=" * 60)
    print(f"运行{title}")
    print("=" * 60)
    cmd = BASE_CMD + extra
    print(f"运行: {' '.join(cmd)}")
    return subprocess.run(cmd, cwd=Path(__file__).parent.parent).returncode


if __name__ == "__main__":
    sys.exit(main())
