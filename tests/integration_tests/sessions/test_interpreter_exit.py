"""
Integration tests: a process that never stops its sessions still exits.
"""
import subprocess
import sys
import textwrap


def run_script(script: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-c", textwrap.dedent(script)],
        capture_output=True,
        text=True,
        timeout=30,
    )


class TestInterpreterExit:

    def test_exits_with_running_session(self):
        result = run_script("""
            from chunkwise import StructuredSession

            session = StructuredSession.start("binary")
            session.write(b"never read")
            print("done main")
        """)
        assert result.returncode == 0, result.stderr
        assert "done main" in result.stdout

    def test_exits_with_many_running_sessions(self):
        result = run_script("""
            from chunkwise import StructuredSession

            sessions = [StructuredSession.start("text") for _ in range(4)]
            for session in sessions:
                session.write("<e>open")
            print("done main")
        """)
        assert result.returncode == 0, result.stderr
        assert "done main" in result.stdout

    def test_exits_after_session_is_dropped(self):
        result = run_script("""
            import gc
            from chunkwise import StructuredSession

            session = StructuredSession.start("binary")
            del session
            gc.collect()
            print("done main")
        """)
        assert result.returncode == 0, result.stderr
        assert "done main" in result.stdout
