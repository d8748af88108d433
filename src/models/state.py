"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern used by
the command line driver and the pipeline() helper for composing stages.
"""

from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for a command line run (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputFiles, execBefore, preambleFiles, luaPaths, defines,
          noLf, highlight, verbosity
        - engine_setup: preprocessor, setupOK
        - inputs_process: exitCode
        - output_flush: (writes output, no additions)

    Attributes:
        inputFiles: Files to process in order ("-" means stdin)
        execBefore: Lua chunks from -e, run before any input
        preambleFiles: Lua files from -l
        luaPaths: Directories from -I
        defines: NAME or NAME=VALUE strings from -D
        noLf: Suppress .lf directives
        highlight: Print highlighted input instead of preprocessing
        verbosity: Logging verbosity level (1-3)
        preprocessor: The Preprocessor built by engine_setup
        setupOK: engine_setup completed without a fatal error
        exitCode: Process exit status accumulated over all stages
    """

    # CLI arguments
    inputFiles: List[str] = field(default_factory=list)
    execBefore: List[str] = field(default_factory=list)
    preambleFiles: List[str] = field(default_factory=list)
    luaPaths: List[str] = field(default_factory=list)
    defines: List[str] = field(default_factory=list)
    noLf: bool = field(default=False)
    highlight: bool = field(default=False)
    verbosity: int = field(default=1)

    # Pipeline state
    preprocessor: Optional[Any] = field(default=None)  # Preprocessor at runtime
    setupOK: bool = field(default=False)
    exitCode: int = field(default=0)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace
    ) -> "ProgramState":
        """
        Create ProgramState from an argparse Namespace.

        Options that do not correspond to a ProgramState field are ignored.

        Args:
            options: Parsed CLI arguments

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        return cls(**filtered_options)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            engine_setup,
            inputs_process,
            output_flush,
        )

    This is equivalent to:
        output_flush(inputs_process(engine_setup(initial_state)))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
