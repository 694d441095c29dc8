import tempfile
import unittest
from pathlib import Path

from deployer.logger import DeployLogger, default_console

from fakes import console_text, make_console


class DeployLoggerTests(unittest.TestCase):
    def test_log_file_has_header_output_and_footer(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            logger = DeployLogger("api", "deploy", log_dir=Path(tmp), console=make_console())
            logger.step("Cloning")
            logger.emit_output("\x1b[32mok: [web1]\x1b[0m\nchanged: [web2]")
            logger.close()

            self.assertEqual(logger.log_path.parent.parent.name, "api")
            self.assertTrue(logger.log_path.name.endswith("_deploy.log"))
            content = logger.log_path.read_text()
            self.assertIn("Service: api", content)
            self.assertIn("Step: Cloning", content)
            self.assertIn("  [output] ok: [web1]", content)
            self.assertIn("  [output] changed: [web2]", content)
            self.assertNotIn("\x1b[", content)
            self.assertIn("Status: SUCCESS", content)

    def test_errors_mark_run_failed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            console = make_console()
            with DeployLogger("api", "deploy", log_dir=Path(tmp), console=console) as logger:
                logger.log_error("Failed to clone [repo]", context="git clone x y")

            content = logger.log_path.read_text()
            self.assertIn("ERROR OCCURRED", content)
            self.assertIn("Status: FAILED", content)
            self.assertIn("✗ Failed to clone [repo]", console_text(console))

    def test_unhandled_exception_is_recorded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(RuntimeError):
                with DeployLogger("api", "deploy", log_dir=Path(tmp), console=make_console()) as logger:
                    raise RuntimeError("boom")

            content = logger.log_path.read_text()
            self.assertIn("RuntimeError: boom", content)
            self.assertIn("Status: FAILED", content)

    def test_output_is_printed_verbatim(self) -> None:
        console = make_console()
        logger = DeployLogger("api", "deploy", console=console)
        logger.emit_output("[WARNING]: [bold]not markup[/bold]\n")
        self.assertIn("[WARNING]: [bold]not markup[/bold]", console_text(console))
        self.assertIsNone(logger.log_path)

    def test_output_keeps_tabs_carriage_returns_and_blank_lines(self) -> None:
        console = make_console()
        logger = DeployLogger("api", "deploy", console=console)
        logger.emit_output("a\tb\rc\n\n")
        self.assertEqual(console_text(console), "a\tb\rc\n\n")

    def test_output_without_final_newline_gets_one(self) -> None:
        console = make_console()
        logger = DeployLogger("api", "deploy", console=console)
        logger.emit_output("PLAY RECAP")
        logger.emit_output("ok=3")
        self.assertEqual(console_text(console), "PLAY RECAP\nok=3\n")

    def test_module_console_is_the_default(self) -> None:
        self.assertIs(DeployLogger("api", "deploy").console, default_console)

    def test_show_command_echoes_command_line(self) -> None:
        console = make_console()
        logger = DeployLogger("api", "deploy", console=console)
        logger.show_command(["ansible-playbook", "--tags", "pull", "site.yml"])
        self.assertIn("$ ansible-playbook --tags pull site.yml", console_text(console))


if __name__ == "__main__":
    unittest.main()
