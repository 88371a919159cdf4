"""
Artifact Loader
Reads compiled contract artifacts and build info produced by the Hardhat compiler
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple
from web3 import Web3
from eth_abi import encode
from loguru import logger

from utils.exceptions import ArtifactNotFoundError, DeploymentError

# EIP-170 runtime bytecode limit
MAX_CONTRACT_SIZE_BYTES = 24576


@dataclass(frozen=True)
class BuildInfo:
    """Compiler input and version used to build an artifact"""
    solc_version: str
    solc_long_version: str
    input: Dict[str, Any] = field(repr=False)

    @property
    def compiler_version(self) -> str:
        """Version string in the form block explorers expect"""
        return f"v{self.solc_long_version}"


@dataclass(frozen=True)
class ContractArtifact:
    """A compiled contract: ABI, creation bytecode and runtime bytecode"""
    contract_name: str
    source_name: str
    abi: List[Dict[str, Any]] = field(repr=False)
    bytecode: str = field(repr=False)
    deployed_bytecode: str = field(repr=False)
    path: Path = None

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    @property
    def constructor_inputs(self) -> List[Dict[str, Any]]:
        for entry in self.abi:
            if entry.get('type') == 'constructor':
                return entry.get('inputs', [])
        return []

    @property
    def deployed_size(self) -> int:
        """Runtime bytecode size in bytes"""
        code = self.deployed_bytecode[2:] if self.deployed_bytecode.startswith('0x') else self.deployed_bytecode
        return len(code) // 2

    def normalize_args(self, args: Sequence[Any]) -> Tuple[Any, ...]:
        """
        Coerce constructor arguments to the types the ABI declares

        Numeric strings become ints for int/uint inputs, address strings are
        checksummed, "true"/"false" become bools. Everything else is passed
        through for the ABI encoder to judge.

        Raises:
            DeploymentError: If the argument count does not match the constructor
        """
        inputs = self.constructor_inputs

        if len(args) != len(inputs):
            raise DeploymentError(
                f"{self.contract_name} constructor expects {len(inputs)} arguments, got {len(args)}"
            )

        return tuple(_coerce(value, item['type']) for value, item in zip(args, inputs))

    def encode_constructor_args(self, args: Sequence[Any]) -> str:
        """ABI-encode constructor arguments as hex without the 0x prefix"""
        inputs = self.constructor_inputs
        if not inputs:
            return ""

        types = [_abi_type(item) for item in inputs]
        return encode(types, list(self.normalize_args(args))).hex()


def _abi_type(item: Dict[str, Any]) -> str:
    """Canonical type string, expanding tuples into (t1,t2,...)"""
    abi_type = item['type']

    if abi_type.startswith('tuple'):
        inner = ",".join(_abi_type(c) for c in item.get('components', []))
        return f"({inner}){abi_type[len('tuple'):]}"

    return abi_type


def _coerce(value: Any, abi_type: str) -> Any:
    if not isinstance(value, str) or abi_type.endswith(']'):
        return value

    if abi_type.startswith(('uint', 'int')):
        try:
            return int(value, 16) if value.lower().startswith('0x') else int(value)
        except ValueError:
            raise DeploymentError(f"Cannot convert {value!r} to {abi_type}")

    if abi_type == 'address':
        return Web3.to_checksum_address(value)

    if abi_type == 'bool' and value.lower() in ('true', 'false'):
        return value.lower() == 'true'

    return value


class ArtifactLoader:
    """
    Locates artifacts under artifacts/contracts/<Source>.sol/<Name>.json
    """

    def __init__(self, artifacts_dir: Path = Path("artifacts")):
        """
        Initialize Artifact Loader

        Args:
            artifacts_dir: Hardhat artifacts directory
        """
        self.artifacts_dir = Path(artifacts_dir)
        self.contracts_dir = self.artifacts_dir / "contracts"

    def load(self, name: str) -> ContractArtifact:
        """
        Load an artifact by contract name or fully qualified name

        Args:
            name: "Raffle" or "contracts/Raffle.sol:Raffle"

        Returns:
            ContractArtifact

        Raises:
            ArtifactNotFoundError: If no artifact (or more than one) matches
        """
        if ':' in name:
            source_name, contract_name = name.rsplit(':', 1)
            path = self.artifacts_dir / source_name / f"{contract_name}.json"
            if not path.exists():
                raise ArtifactNotFoundError(f"Contract artifact not found: {path}")
            return self._read(path)

        matches = [
            path for path in self._artifact_paths()
            if path.stem == name
        ]

        if not matches:
            raise ArtifactNotFoundError(
                f"Contract artifact not found for {name} in {self.contracts_dir} "
                "(compile the contracts first)"
            )

        if len(matches) > 1:
            sources = ", ".join(str(p.parent.relative_to(self.artifacts_dir)) for p in matches)
            raise ArtifactNotFoundError(
                f"Multiple artifacts named {name} ({sources}); use a fully qualified name"
            )

        return self._read(matches[0])

    def list_artifacts(self) -> List[ContractArtifact]:
        """Load every contract artifact, sorted by fully qualified name"""
        artifacts = [self._read(path) for path in self._artifact_paths()]
        return sorted(artifacts, key=lambda a: a.fully_qualified_name)

    def load_build_info(self, artifact: ContractArtifact) -> BuildInfo:
        """
        Load the compiler input referenced by an artifact's .dbg.json file

        Raises:
            ArtifactNotFoundError: If the debug file or build info is missing
        """
        dbg_path = artifact.path.with_name(f"{artifact.contract_name}.dbg.json")

        if not dbg_path.exists():
            raise ArtifactNotFoundError(f"Debug file not found: {dbg_path}")

        with open(dbg_path, 'r') as f:
            dbg = json.load(f)

        build_info_path = (dbg_path.parent / dbg['buildInfo']).resolve()

        if not build_info_path.exists():
            raise ArtifactNotFoundError(f"Build info not found: {build_info_path}")

        with open(build_info_path, 'r') as f:
            build_info = json.load(f)

        return BuildInfo(
            solc_version=build_info['solcVersion'],
            solc_long_version=build_info['solcLongVersion'],
            input=build_info['input']
        )

    def _artifact_paths(self) -> List[Path]:
        if not self.contracts_dir.exists():
            return []

        return sorted(
            path for path in self.contracts_dir.rglob("*.json")
            if not path.name.endswith(".dbg.json")
        )

    def _read(self, path: Path) -> ContractArtifact:
        with open(path, 'r') as f:
            data = json.load(f)

        logger.debug(f"Loaded artifact {path}")

        return ContractArtifact(
            contract_name=data['contractName'],
            source_name=data['sourceName'],
            abi=data['abi'],
            bytecode=data['bytecode'],
            deployed_bytecode=data.get('deployedBytecode', '0x'),
            path=path
        )
