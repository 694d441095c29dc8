import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from click.testing import CliRunner

from deployer import main as main_module
from deployer.exceptions import ConfigurationError
from deployer.main import cli

from fakes import (
    RecordingRunner,
    ansible_tag,
    console_text,
    fake_which,
    git_step,
    make_console,
    missing_tool,
)

REQUIRED_ARGS = [
    "--git-repo-internal", "https://git.example.com/ops/internal.git",
    "--repo", "api",
    "--vault-pass", "/etc/ansible/vault-pass",
    "--secret", "secrets.yml",
    "--inventory", "inventories/dev",
    "--user", "deploy",
    "--service", "api",
    "--pull-tag", "pull",
    "--config-tag", "config",
    "--service-tag", "service",
    "--restart-tag", "restart",
    "--playbook", "site.yml",
]


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.workdir = Path(self._tmp.name)
        self.cli_runner = CliRunner()
        self.console = make_console()
        # load_dotenv writes straight into os.environ
        env_patch = mock.patch.dict(os.environ, {}, clear=False)
        env_patch.start()
        self.addCleanup(env_patch.stop)
        for key in [k for k in os.environ if k.startswith("DEPLOYER_")]:
            del os.environ[key]

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def invoke(self, args, runner=None, env=None, which=fake_which):
        self.runner = runner or RecordingRunner()
        obj = {"runner": self.runner, "which": which, "console": self.console}
        with self.cli_runner.isolated_filesystem(temp_dir=self.workdir):
            return self.cli_runner.invoke(
                cli, ["--no-log-file", *args], obj=obj, env=env, catch_exceptions=False
            )


class DeployCliTests(CliTestCase):
    def test_missing_flag_exits_with_config_status(self) -> None:
        args = [a for a in REQUIRED_ARGS]
        index = args.index("--git-repo-internal")
        del args[index:index + 2]

        result = self.invoke(["deploy", *args, "--workdir", str(self.workdir)])

        self.assertEqual(result.exit_code, 2)
        self.assertIn("--git-repo-internal must be set.", console_text(self.console))
        self.assertEqual(self.runner.calls, [])

    def test_header_without_repo_does_not_render_image(self) -> None:
        args = [a for a in REQUIRED_ARGS]
        index = args.index("--repo")
        del args[index:index + 2]

        result = self.invoke(["deploy", *args, "--workdir", str(self.workdir)])

        self.assertEqual(result.exit_code, 2)
        output = console_text(self.console)
        self.assertIn("--repo must be set.", output)
        self.assertNotIn("None", output)

    def test_successful_deploy(self) -> None:
        result = self.invoke(["deploy", *REQUIRED_ARGS, "--workdir", str(self.workdir)])

        self.assertEqual(result.exit_code, 0, console_text(self.console))
        steps = [git_step(a) or ansible_tag(a) for a in self.runner.argvs]
        self.assertEqual(
            steps, ["clone", "checkout", "pull", "pull", "config", "service", "restart"]
        )
        self.assertIn("Deployed api", console_text(self.console))

    def test_restart_failure_exits_with_phase_status(self) -> None:
        runner = RecordingRunner(fail_when=lambda args: ansible_tag(args) == "restart")

        result = self.invoke(
            ["deploy", *REQUIRED_ARGS, "--workdir", str(self.workdir)], runner=runner
        )

        self.assertEqual(result.exit_code, 23)
        self.assertEqual(ansible_tag(runner.argvs[-1]), "restart")

    def test_become_escalation(self) -> None:
        result = self.invoke(
            [
                "deploy",
                *REQUIRED_ARGS,
                "--workdir", str(self.workdir),
                "--escalation", "become",
            ]
        )

        self.assertEqual(result.exit_code, 0)
        playbook_runs = [a for a in self.runner.argvs if ansible_tag(a)]
        self.assertTrue(all("--become" in a for a in playbook_runs))

    def test_values_from_config_file(self) -> None:
        config_file = self.workdir / "deploy.yml"
        config_file.write_text(
            "git-repo-internal: https://git.example.com/ops/internal.git\n"
            "repo: api\n"
            "tag: '1.4'\n"
            "vault_pass: /etc/ansible/vault-pass\n"
            "secret: secrets.yml\n"
            "inventory: inventories/dev\n"
            "user: deploy\n"
            "service: api\n"
            "pull-tag: pull\n"
            "config-tag: config\n"
            "service-tag: service\n"
            "restart-tag: restart\n"
            "playbook: site.yml\n"
            f"workdir: {self.workdir}\n"
        )

        result = self.invoke(
            ["--config", str(config_file), "deploy", "--service", "worker"]
        )

        self.assertEqual(result.exit_code, 0, console_text(self.console))
        self.assertIn("discoenv/api:1.4", console_text(self.console))
        self.assertIn("Deployed worker", console_text(self.console))

    def test_environment_overrides_config_file(self) -> None:
        config_file = self.workdir / "deploy.yml"
        config_file.write_text("playbook: from-file.yml\n")

        args = [a for a in REQUIRED_ARGS]
        index = args.index("--playbook")
        del args[index:index + 2]

        result = self.invoke(
            ["--config", str(config_file), "deploy", *args, "--workdir", str(self.workdir)],
            env={"DEPLOYER_PLAYBOOK": "from-env.yml"},
        )

        self.assertEqual(result.exit_code, 0, console_text(self.console))
        playbook_runs = [a for a in self.runner.argvs if ansible_tag(a)]
        self.assertTrue(all(a[-1] == "from-env.yml" for a in playbook_runs))

    def test_unknown_config_key_is_rejected(self) -> None:
        config_file = self.workdir / "deploy.yml"
        config_file.write_text("playbok: site.yml\n")

        with self.assertRaises(ConfigurationError) as ctx:
            self.invoke(["--config", str(config_file), "deploy"])
        self.assertIn("playbok", str(ctx.exception))

    def test_entry_point_maps_bad_config_file_to_config_status(self) -> None:
        config_file = self.workdir / "deploy.yml"
        config_file.write_text("playbok: site.yml\n")
        env_file = self.workdir / "empty.env"
        env_file.write_text("")
        argv = [
            "deployer",
            "--no-log-file",
            "--env-file", str(env_file),
            "--config", str(config_file),
            "deploy",
        ]

        with mock.patch.object(sys, "argv", argv), mock.patch.object(
            main_module, "console", make_console()
        ):
            with self.assertRaises(SystemExit) as ctx:
                main_module.main()
        self.assertEqual(ctx.exception.code, 2)

    def test_missing_tool_exits_with_tool_status(self) -> None:
        result = self.invoke(
            ["deploy", *REQUIRED_ARGS, "--workdir", str(self.workdir)],
            which=missing_tool("git"),
        )

        self.assertEqual(result.exit_code, 3)
        self.assertIn('exec: "git"', console_text(self.console))
        self.assertEqual(self.runner.calls, [])


class AdhocCliTests(CliTestCase):
    def test_adhoc_runs_ansible(self) -> None:
        result = self.invoke(["adhoc", "web", "uptime", "-i", "hosts"])

        self.assertEqual(result.exit_code, 0, console_text(self.console))
        self.assertEqual(
            self.runner.argvs, [("/usr/bin/ansible", "web", "-i", "hosts", "-a", "uptime")]
        )

    def test_adhoc_failure_status(self) -> None:
        runner = RecordingRunner(fail_when=lambda args: True, output="web1 | UNREACHABLE!")

        result = self.invoke(["adhoc", "web", "uptime"], runner=runner)

        self.assertEqual(result.exit_code, 30)
        self.assertIn("web1 | UNREACHABLE!", console_text(self.console))

    def test_blank_command_is_rejected(self) -> None:
        result = self.invoke(["adhoc", "web", "  "])

        self.assertEqual(result.exit_code, 2)
        self.assertEqual(self.runner.calls, [])


if __name__ == "__main__":
    unittest.main()
