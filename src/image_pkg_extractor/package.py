"""Async functional package descriptor operations."""

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from .core.daemon import save_image
from .core.opener import FileOpener
from .core.types import DaemonConfig, ExtractorConfig
from .fetch import fetch_file
from .utils.sink import write_bytes_async

logger = logging.getLogger(__name__)

PACKAGE_FILE = "package.yaml"


async def fetch_file_from_tar(
    tar_path: Union[str, Path],
    target_path: str,
    config: Optional[ExtractorConfig] = None,
) -> bytes:
    """저장된 이미지 tar 파일에서 단일 파일의 내용을 비동기로 추출합니다.

    Args:
        tar_path: `docker save`로 생성된 tar 파일 경로
            - 상대경로: "nginx.tar", "./images/provider.tar"
            - 절대경로: "/tmp/images/provider.tar"
        target_path: 레이어 안의 정확한 파일 경로 (예: "package.yaml")
        config: 추출 설정 (기본값: ExtractorConfig())

    Returns:
        bytes: 파일 내용

    Raises:
        OpenFailedError: tar 파일을 열 수 없는 경우
        FileNotFoundInAnyLayerError: 어떤 레이어에도 파일이 없는 경우
        MalformedArchiveError: tar 형식이 손상된 경우

    Examples:
        # 저장된 이미지에서 package.yaml 추출
        content = await fetch_file_from_tar("provider.tar", "package.yaml")
    """
    # tar scanning is blocking, run it in the default thread pool
    return await asyncio.get_running_loop().run_in_executor(
        None, fetch_file, FileOpener(tar_path), target_path, config
    )


async def _fetch_from_image(
    image: str,
    target_path: str,
    config: Optional[ExtractorConfig],
    daemon_config: Optional[DaemonConfig],
) -> bytes:
    tmp_dir = tempfile.mkdtemp(prefix="xpkg-")
    try:
        tar_path = await save_image(image, Path(tmp_dir) / "image.tar", daemon_config)
        return await fetch_file_from_tar(tar_path, target_path, config)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)


async def fetch_package_content(
    image: str,
    package_file: str = PACKAGE_FILE,
    config: Optional[ExtractorConfig] = None,
    daemon_config: Optional[DaemonConfig] = None,
) -> str:
    """패키지 이미지에서 패키지 디스크립터(package.yaml) 내용을 가져옵니다.

    Docker 데몬에서 이미지를 임시 tar 파일로 저장한 뒤, 디스크립터가 들어 있는
    레이어를 찾아 파일을 추출합니다. 임시 파일은 성공 여부와 관계없이 삭제됩니다.

    Args:
        image: 이미지 참조 (예: "crossplane/provider-nop:v0.2.1")
        package_file: 레이어 안의 디스크립터 경로 (기본값: "package.yaml")
        config: 추출 설정 (기본값: ExtractorConfig())
        daemon_config: Docker 데몬 연결 설정 (기본값: DOCKER_HOST 환경변수)

    Returns:
        str: UTF-8로 디코딩된 디스크립터 내용

    Raises:
        OpenFailedError: 데몬 연결 또는 이미지 저장 실패 시
        FileNotFoundInAnyLayerError: 디스크립터가 어떤 레이어에도 없는 경우

    Examples:
        # 프로바이더 패키지의 package.yaml 읽기
        content = await fetch_package_content("crossplane/provider-nop:v0.2.1")
        print(content)
    """
    data = await _fetch_from_image(image, package_file, config, daemon_config)
    return data.decode("utf-8")


async def save_package(
    image: str,
    target_file: Union[str, Path],
    package_file: str = PACKAGE_FILE,
    config: Optional[ExtractorConfig] = None,
    daemon_config: Optional[DaemonConfig] = None,
) -> str:
    """패키지 디스크립터를 gzip으로 압축하여 지정한 파일에 저장합니다.

    Args:
        image: 이미지 참조 (예: "crossplane/provider-nop:v0.2.1")
        target_file: 저장할 파일 경로 (예: "./cache/provider-nop.gz")
        package_file: 레이어 안의 디스크립터 경로 (기본값: "package.yaml")
        config: 추출 설정 (기본값: ExtractorConfig())
        daemon_config: Docker 데몬 연결 설정

    Returns:
        str: 압축 전 내용의 digest (예: "sha256:abc123...")

    Raises:
        OpenFailedError: 데몬 연결 또는 이미지 저장 실패 시
        FileNotFoundInAnyLayerError: 디스크립터가 어떤 레이어에도 없는 경우
        WriteFailedError: 파일 쓰기 실패 시 (파일은 폐기해야 합니다)

    Examples:
        # 캐시용 압축 디스크립터 저장
        digest = await save_package("crossplane/provider-nop:v0.2.1", "nop.yaml.gz")
    """
    data = await _fetch_from_image(image, package_file, config, daemon_config)
    digest = await write_bytes_async(data, target_file, compress=True)
    logger.info("Saved %s of %s to %s (%s)", package_file, image, target_file, digest)
    return digest
