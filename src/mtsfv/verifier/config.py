"""Configuration models for the verifier."""

from pydantic import BaseModel, Field, ConfigDict, PositiveInt

from mtsfv.common import CRC32_CHUNK_SIZE, LoggingConfig


class VerifierConfig(BaseModel):
    """Verification engine tuning."""

    model_config = ConfigDict(extra='forbid')

    chunk_size: int = Field(
        default=CRC32_CHUNK_SIZE,
        gt=0,
        description="Bytes read per chunk while checksumming"
    )
    max_workers: PositiveInt | None = Field(
        default=None,
        description="Worker pool size; unset starts one thread per file"
    )
    work_queue_maxsize: int = Field(
        default=1000,
        gt=0,
        description="Maximum number of jobs queued for the worker pool"
    )
    poll_interval: float = Field(
        default=0.05,
        gt=0,
        description="Seconds between result polls when waiting for a batch"
    )
    progress_log_interval: int = Field(
        default=100,
        gt=0,
        description="Log progress every N completed files"
    )


class MTSFVConfig(BaseModel):
    """Root configuration for mtsfv."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    verifier: VerifierConfig = Field(default_factory=VerifierConfig)
