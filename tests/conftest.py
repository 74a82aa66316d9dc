"""Shared fixtures: a realistic generator-format shard and counting transports."""

import asyncio
import json

import pytest

from doxsearch.engine.index.store import IndexStore
from doxsearch.engine.index.transport import MemoryShardFetcher
from doxsearch.engine.query_engine import QueryEngine
from doxsearch.errors import ShardLoadFailed, ShardNotFound

# Excerpt of an ``enumvalues_72.js`` shard. ``read`` sits after ``read_1`` and
# ``read_2`` so ranking has to move it up.
R_SHARD_JS = """var searchData=
[
  ['r',['R',['../structnvbio_1_1_alphabet_traits_3_01_d_n_a___i_u_p_a_c_01_4.html#a15c877c5500ab6997e781097c1859dbc',1,'nvbio::AlphabetTraits&lt; DNA_IUPAC &gt;::R()'],['../structnvbio_1_1_alphabet_traits_3_01_p_r_o_t_e_i_n_01_4.html#a87f9f74f48d09677016d783f71feb4f0',1,'nvbio::AlphabetTraits&lt; PROTEIN &gt;::R()']]],
  ['read_5f1',['READ_1',['../struct_bam_tools_1_1_bam_alignment.html#a6b5deec610100dd0d7b3a0079fde36b6a5d21',1,'BamTools::BamAlignment::READ_1()'],['../structnvbio_1_1io_1_1_debug_output_1_1_dbg_info.html#a07dd5375ed29ae335d6917fa2249e6afa438b',1,'nvbio::io::DebugOutput::DbgInfo::READ_1()']]],
  ['read_5f2',['READ_2',['../struct_bam_tools_1_1_bam_alignment.html#a6b5deec610100dd0d7b3a0079fde36b6aa780',1,'BamTools::BamAlignment::READ_2()']]],
  ['read',['read',['../structnvbio_1_1io_1_1_sequence_data_stream.html#a2a4f09c6c0e1',1,'nvbio::io::SequenceDataStream::read()']]],
  ['reads',['READS',['../structnvbio_1_1io_1_1_read_data_device.html#a4ef01e17121b43a0851ce3c088ac2f6e',1,'nvbio::io::ReadDataDevice']]],
  ['reverse',['REVERSE',['../struct_bam_tools_1_1_bam_alignment.html#a6b5deec610100dd0d7b3a0079fde36b6a68a4',1,'BamTools::BamAlignment::REVERSE()'],['../structnvbio_1_1io_1_1_debug_output_1_1_dbg_info.html#a07dd5375ed29ae335d6917fa2249e6afa8d6c',1,'nvbio::io::DebugOutput::DbgInfo::REVERSE()']]],
  ['reverse_5fcomplement',['REVERSE_COMPLEMENT',['../group___sequence_i_o.html#ggaa3df48d0ab11675e05f2c34fb70e5673a5655',1,'nvbio::io']]],
  ['rna',['RNA',['../group___alphabets_module.html#ggacd06da18687b2a345bef56a9fdad1a48a0ced',1,'nvbio']]],
  ['row_5fmajor_5flayout',['ROW_MAJOR_LAYOUT',['../group___iterators.html#ggaae4c461cc073c89f2797df5f895ab6e4ade4',1,'nvbio']]]
];
"""

# A JSON shard for the ``s`` key, in the plain keyed-table format.
S_SHARD_JSON = json.dumps({
    "seed": ["SEED", [["../struct_seed.html#a01", "nvbio::Seed"]]],
    "score": ["score", [
        ["../struct_scoring.html#a02", "nvbio::Scoring"],
        ["../struct_ed.html#a03", 0, "nvbio::EditDistance"],
    ]],
    "subseed": ["SUBSEED", [["struct_sub.html#a04", "nvbio::SubSeed"]]],
})


class CountingFetcher:
    """In-memory transport that counts fetches and can hold them open."""

    def __init__(self, shards, gate=None, failures=None):
        self.shards = shards
        self.gate = gate
        self.failures = list(failures or [])
        self.calls: list[str] = []

    async def fetch_shard(self, shard_key: str) -> bytes:
        self.calls.append(shard_key)
        if self.gate is not None:
            await self.gate.wait()
        if self.failures:
            raise self.failures.pop(0)
        if shard_key not in self.shards:
            raise ShardNotFound(shard_key)
        return self.shards[shard_key].encode("utf-8")


@pytest.fixture
def shards():
    return {"r": R_SHARD_JS, "s": S_SHARD_JSON}


@pytest.fixture
def fetcher(shards):
    return MemoryShardFetcher(shards)


@pytest.fixture
def store(fetcher):
    return IndexStore(fetcher)


@pytest.fixture
def engine(store):
    return QueryEngine(store)


@pytest.fixture
def counting_fetcher(shards):
    return CountingFetcher(shards)


@pytest.fixture
def gated_fetcher(shards):
    return CountingFetcher(shards, gate=asyncio.Event())


@pytest.fixture
def flaky_fetcher(shards):
    """Fails the first fetch with a transport error, then succeeds."""
    return CountingFetcher(shards, failures=[ShardLoadFailed("r", "connection reset")])
