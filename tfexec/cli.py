import logging
from contextlib import ExitStack
from typing import List, Optional, Sequence, Tuple

from packaging.specifiers import SpecifierSet
from packaging.version import Version

from tfexec.common import build_options, has_prefix_option, split_lines
from tfexec.config import TerraformConfig
from tfexec.exceptions import TerraformCommandError, TerraformOptionConflictError
from tfexec.executor import CommandResult, Executor
from tfexec.state import Plan, State, read_blob, temp_file
from tfexec.version import parse_version, truncate_pre_release_version

logger = logging.getLogger(__name__)


class TerraformCLI:
    """Terraform command line.

    Every command is delegated to the executor, so the same code runs against
    a real terraform binary (SubprocessExecutor) or scripted results (MockExecutor).

    Commands accept extra options two ways, and both may be mixed:
        positional strings passed through as is, ex. cli.destroy('-input=false')
        keyword options converted by build_options, ex. cli.destroy(input=False)
    Positional option strings come first, then keyword options, in the given order.

    https://www.terraform.io/
    """

    def __init__(self, executor: Executor, exec_path: str = None, timeout: float = None):
        config = TerraformConfig.from_env(exec_path=exec_path, timeout=timeout)
        self._executor = executor
        self._exec_path = config.exec_path
        self.timeout = config.timeout

    def __repr__(self):
        return f'<TerraformCLI exec_path={self._exec_path!r} executor={self._executor!r}>'

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def exec_path(self) -> str:
        return self._exec_path

    def set_exec_path(self, exec_path: str):
        """Change the terraform binary to run, ex. a path to a specific version."""
        self._exec_path = exec_path

    def run(self, *args: str, check: bool = True, timeout: float = None) -> CommandResult:
        """
        Run terraform with args and return the CommandResult.

        If check is True and the return code was non 0, it raises a
        TerraformCommandError. The TerraformCommandError object will have the return code
        in the retcode attribute, and stdout & stderr attributes.

        :param args: Terraform command and its arguments, ex. ('state', 'list').
        :param check: Whether to check return code.
        :param timeout: Seconds to wait, defaults to the timeout of this instance.
        """
        argv = [self._exec_path, *args]
        result = self._executor.run(argv, timeout=timeout if timeout is not None else self.timeout)
        if check and result.retcode != 0:
            raise TerraformCommandError(result.retcode, argv, result.stdout, result.stderr)
        return result

    def version(self) -> Version:
        """Refer to https://www.terraform.io/docs/commands/version

        Return the version of terraform. Notices printed after the first line,
        such as an out of date warning, are ignored.
        """
        result = self.run('version')
        return parse_version(result.stdout)

    def version_satisfies(self, specifier: str) -> bool:
        """
        Whether the terraform version is within specifier, ex. ">=0.13,<2".

        Pre-release versions are compared as their release, so 1.6.0-rc1
        satisfies ">=1.6".
        """
        version = truncate_pre_release_version(self.version())
        return version in SpecifierSet(specifier)

    def init(self, *opts: str, dir: str = None, **options):
        """Refer to https://www.terraform.io/docs/commands/init

        Initialize a new or existing Terraform working directory by creating
        initial files, loading any remote state, downloading modules, etc.

        :param opts: Command options, ex. '-input=false', '-no-color'.
        :param dir: Configuration directory, appended as the last argument.
        :param options: More command options.
        """
        args = [dir] if dir else []
        self._run_with_options(['init'], opts, options, args)

    def plan(self, *opts: str, state: State = None, dir: str = None, **options) -> Optional[Plan]:
        """Refer to https://www.terraform.io/docs/commands/plan

        Generate an execution plan and return the saved plan file, or None if
        terraform exited successfully without writing one.

        :param opts: Command options, ex. '-input=false', '-no-color'.
        :param state: State to plan against, written to a temporary file
            and passed with -state=.
        :param dir: Configuration directory, appended as the last argument.
        :param options: More command options.
        """
        args = [dir] if dir else []
        with ExitStack() as stack:
            injected = []
            if state is not None:
                injected.append(f'-state={self._enter_temp_file(stack, state)}')
            plan_path = stack.enter_context(temp_file(name='tfexec.tfplan'))
            injected.append(f'-out={plan_path}')
            self._run_with_options(['plan'], opts, options, args, injected=injected)
            return read_blob(plan_path, Plan)

    def apply(self, *opts: str, plan: Plan = None, state: State = None, **options):
        """Refer to https://www.terraform.io/docs/commands/apply

        Create or update infrastructure. If plan is given, the actions saved in
        it are applied without generating a new plan.

        :param opts: Command options, ex. '-input=false', '-auto-approve'.
        :param plan: Saved plan, written to a temporary file passed as the last argument.
        :param state: State to apply against, written to a temporary file
            and passed with -state=.
        :param options: More command options.
        """
        with ExitStack() as stack:
            injected = []
            if state is not None:
                injected.append(f'-state={self._enter_temp_file(stack, state)}')
            args = []
            if plan is not None:
                args.append(stack.enter_context(temp_file(plan, name='tfexec.tfplan')))
            self._run_with_options(['apply'], opts, options, args, injected=injected)

    def destroy(self, *opts: str, dir: str = None, **options):
        """Refer to https://www.terraform.io/docs/commands/destroy

        Destroy Terraform-managed infrastructure.

        :param opts: Command options, ex. '-input=false', '-no-color'.
        :param dir: Configuration directory, appended as the last argument.
        :param options: More command options.
        """
        args = [dir] if dir else []
        self._run_with_options(['destroy'], opts, options, args)

    def import_resource(self, address: str, id: str, *opts: str, state: State = None, **options) -> Optional[State]:
        """Refer to https://www.terraform.io/docs/commands/import

        Import existing infrastructure into your Terraform state.

        :param address: The address to import the resource to.
        :param id: The resource-specific ID of the resource being imported.
        :param opts: Command options.
        :param state: State to import into. When given, the updated state is returned.
        :param options: More command options.
        """
        with ExitStack() as stack:
            injected = []
            state_path = None
            if state is not None:
                state_path = self._enter_temp_file(stack, state)
                injected.append(f'-state={state_path}')
            self._run_with_options(['import'], opts, options, [address, id], injected=injected)
            return read_blob(state_path) if state_path else None

    def state_list(
            self,
            *opts: str,
            state: State = None,
            addresses: Sequence[str] = None,
            **options,
    ) -> List[str]:
        """Refer to https://www.terraform.io/docs/commands/state/list

        List resources in the Terraform state. An empty list is returned when
        there are no resources.

        :param opts: Command options, ex. '-id=xxx'.
        :param state: State to list, written to a temporary file and passed with -state=.
            It cannot be combined with a -state= option.
        :param addresses: Filter the instances by resource or module addresses.
        :param options: More command options.
        """
        with ExitStack() as stack:
            injected = []
            if state is not None:
                injected.append(f'-state={self._enter_temp_file(stack, state)}')
            result = self._run_with_options(['state', 'list'], opts, options, addresses or [], injected=injected)
        return split_lines(result.stdout)

    def state_pull(self, *opts: str, **options) -> State:
        """Refer to https://www.terraform.io/docs/commands/state/pull

        Pull the state from its location and return it.
        """
        result = self._run_with_options(['state', 'pull'], opts, options)
        return State(result.stdout.encode('utf-8'))

    def state_push(self, state: State, *opts: str, **options):
        """Refer to https://www.terraform.io/docs/commands/state/push

        Update remote state from state. Terraform protects against writing an
        older serial or a different lineage unless the -force option is given.
        """
        with temp_file(state) as path:
            self._run_with_options(['state', 'push'], opts, options, [path])

    def state_mv(
            self,
            source: str,
            destination: str,
            *opts: str,
            state: State = None,
            state_out: State = None,
            **options,
    ) -> Tuple[Optional[State], Optional[State]]:
        """Refer to https://www.terraform.io/docs/commands/state/mv

        Move an item in the state, or to another state when state_out is given.

        :param source: Source address of resource.
        :param destination: Destination address of resource.
        :param opts: Command options.
        :param state: State to move from, passed with -state=.
        :param state_out: State to move to, passed with -state-out=.
        :param options: More command options.
        :return: Updated (state, state_out), each None when it was not given.
        """
        with ExitStack() as stack:
            injected = []
            state_path = state_out_path = None
            if state is not None:
                state_path = self._enter_temp_file(stack, state)
                injected.append(f'-state={state_path}')
            if state_out is not None:
                state_out_path = self._enter_temp_file(stack, state_out)
                injected.append(f'-state-out={state_out_path}')
            self._run_with_options(['state', 'mv'], opts, options, [source, destination], injected=injected)
            updated = read_blob(state_path) if state_path else None
            updated_out = read_blob(state_out_path) if state_out_path else None
        return updated, updated_out

    def state_rm(self, addresses: Sequence[str], *opts: str, state: State = None, **options) -> Optional[State]:
        """Refer to https://www.terraform.io/docs/commands/state/rm

        Remove items from the state without destroying them.

        :param addresses: The address list of resources.
        :param opts: Command options.
        :param state: State to update. When given, the updated state is returned.
        :param options: More command options.
        """
        with ExitStack() as stack:
            injected = []
            state_path = None
            if state is not None:
                state_path = self._enter_temp_file(stack, state)
                injected.append(f'-state={state_path}')
            self._run_with_options(['state', 'rm'], opts, options, list(addresses), injected=injected)
            return read_blob(state_path) if state_path else None

    def workspace_new(self, name: str, *opts: str, **options):
        """Refer to https://www.terraform.io/docs/commands/workspace/new"""
        self._run_with_options(['workspace', 'new'], opts, options, [name])

    def workspace_select(self, name: str, *opts: str, **options):
        """Refer to https://www.terraform.io/docs/commands/workspace/select"""
        self._run_with_options(['workspace', 'select'], opts, options, [name])

    def workspace_show(self) -> str:
        """Refer to https://www.terraform.io/docs/commands/workspace/show"""
        result = self.run('workspace', 'show')
        return result.stdout.strip()

    def workspace_list(self) -> Tuple[List[str], Optional[str]]:
        """Refer to https://www.terraform.io/docs/commands/workspace/list

        Return the workspace names and the current one, which terraform marks with "*".
        """
        result = self.run('workspace', 'list')
        names = []
        current = None
        for line in split_lines(result.stdout):
            name = line.strip()
            if name.startswith('*'):
                name = name[1:].strip()
                current = name
            if name:
                names.append(name)
        return names, current

    def _run_with_options(
            self,
            cmd: List[str],
            opts: Sequence[str],
            options: dict,
            args: Sequence[str] = (),
            injected: Sequence[str] = (),
    ) -> CommandResult:
        caller_opts = [*opts, *build_options(options)]
        argv = [*cmd, *injected, *caller_opts, *args]
        for option in injected:
            prefix = option.split('=', 1)[0] + '='
            if has_prefix_option(caller_opts, prefix):
                raise TerraformOptionConflictError([self._exec_path, *argv], prefix)
        return self.run(*argv)

    @staticmethod
    def _enter_temp_file(stack: ExitStack, blob) -> str:
        path = stack.enter_context(temp_file(blob))
        logger.debug('wrote %s to %s', blob, path)
        return path
