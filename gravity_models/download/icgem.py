"""
Download gravity field coefficient files from ICGEM.

Files are stored in a local cache and downloaded only when no cached copy
exists or when a download is forced.

Cache location:
  $GRAVITY_MODELS_CACHE, or ~/.cache/gravity_models/icgem

Usage:
  python -m gravity_models.download.icgem EGM96
  python -m gravity_models.download.icgem EGM2008 --force
"""
import argparse
import os
import tempfile

import requests

from pathlib import Path
from typing  import Dict, Iterator, Optional, Union
from urllib.parse import urlparse


# Direct download URLs of the pre-configured models
ICGEM_MODELS = {
  'EGM96'   : 'http://icgem.gfz-potsdam.de/getmodel/gfc/971b0a3b49a497910aad23cd85e066d4cd9af0aeafe7ce6301a696bed8570be3/EGM96.gfc',
  'EGM2008' : 'https://icgem.gfz.de/getmodel/gfc/c50128797a9cb62e936337c890e4425f03f0461d7329b09a8cc8561504465340/EGM2008.gfc',
}

CACHE_ENV_VAR = 'GRAVITY_MODELS_CACHE'

# Connect and read timeout [s]
REQUEST_TIMEOUT = 30

CHUNK_SIZE = 1024 * 1024


class ModelCache:
  """
  Key-value store mapping a model file name to its path in a local directory.
  """
  def __init__(
    self,
    root : Optional[Union[str, Path]] = None,
  ):
    if root is None:
      root = os.environ.get(CACHE_ENV_VAR) or Path.home() / '.cache' / 'gravity_models' / 'icgem'
    self.root = Path(root)

  def path(
    self,
    key : str,
  ) -> Path:
    """Location of the entry `key` (whether or not it exists)."""
    return self.root / key

  def get(
    self,
    key : str,
  ) -> Optional[Path]:
    """Path of the cached entry `key`, or None if it is not cached."""
    filepath = self.path(key)
    return filepath if filepath.is_file() else None

  def __contains__(
    self,
    key : str,
  ) -> bool:
    return self.get(key) is not None

  def __iter__(
    self,
  ) -> Iterator[str]:
    if not self.root.is_dir():
      return iter(())
    return iter(sorted(entry.name for entry in self.root.iterdir() if entry.is_file()))

  def remove(
    self,
    key : str,
  ) -> None:
    filepath = self.get(key)
    if filepath is not None:
      filepath.unlink()


def resolve_model_url(
  identifier_or_url : str,
) -> Dict[str, str]:
  """
  Resolve a model identifier or a URL into its download URL and cache key.

  Input:
  ------
    identifier_or_url : str
      Pre-configured identifier (e.g. 'EGM96', case-insensitive) or URL.

  Output:
  -------
    resolved : dict
      'url' : download URL, 'key' : cache file name.
  """
  identifier = identifier_or_url.strip()

  for model_name, url in ICGEM_MODELS.items():
    if identifier.upper() == model_name:
      return {'url': url, 'key': f'{model_name}.gfc'}

  parsed = urlparse(identifier)
  if parsed.scheme not in ('http', 'https', 'ftp'):
    raise ValueError(
      f"Unknown gravity model '{identifier_or_url}'. "
      f"Use one of {list(ICGEM_MODELS)} or a download URL."
    )

  key = Path(parsed.path).name
  if not key:
    raise ValueError(f"Cannot determine a file name from the URL '{identifier_or_url}'")

  return {'url': identifier, 'key': key}


def download_with_progress(
  url         : str,
  output_file : Path,
  session     : Optional[requests.Session] = None,
) -> Path:
  """
  Stream a file to disk, printing the progress.

  The data is written to a temporary file in the destination directory and
  renamed into place once complete, so an interrupted download never leaves a
  partial file behind.

  Input:
  ------
    url : str
      Download URL.
    output_file : Path
      Destination file.
    session : requests.Session, optional
      Session used for the request.

  Output:
  -------
    output_file : Path
      Destination file.

  Raises:
  -------
    requests.RequestException
      If the request fails or the server returns an error status.
  """
  http = session if session is not None else requests
  output_file.parent.mkdir(parents=True, exist_ok=True)

  fd, tmp_name = tempfile.mkstemp(dir=output_file.parent, prefix=f'.{output_file.name}.', suffix='.part')
  tmp_path     = Path(tmp_name)

  try:
    with os.fdopen(fd, 'wb') as f, http.get(url, stream=True, timeout=REQUEST_TIMEOUT) as response:
      response.raise_for_status()

      total_size = int(response.headers.get('content-length', 0) or 0)
      downloaded = 0

      for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        if not chunk:
          continue
        f.write(chunk)
        downloaded += len(chunk)

        mb_downloaded = downloaded / (1024 * 1024)
        if total_size > 0:
          percent  = min(downloaded * 100 / total_size, 100)
          mb_total = total_size / (1024 * 1024)
          print(f"\r  Progress: {percent:5.1f}% ({mb_downloaded:6.1f} / {mb_total:6.1f} MB)", end='', flush=True)
        else:
          print(f"\r  Progress: {mb_downloaded:6.1f} MB", end='', flush=True)
      print()

    os.replace(tmp_path, output_file)
  except BaseException:
    # Remove partial download
    if tmp_path.exists():
      tmp_path.unlink()
    raise

  return output_file


def fetch_icgem_file(
  identifier_or_url : str,
  force             : bool = False,
  cache             : Optional[ModelCache] = None,
  session           : Optional[requests.Session] = None,
) -> Path:
  """
  Return the local path of a gravity model file, downloading it if needed.

  Input:
  ------
    identifier_or_url : str
      Pre-configured identifier ('EGM96', 'EGM2008') or download URL.
    force : bool
      Download the file even if a cached copy exists.
    cache : ModelCache, optional
      Cache store (default: ModelCache()).
    session : requests.Session, optional
      Session used for the download.

  Output:
  -------
    filepath : Path
      Path to the cached file.
  """
  cache    = cache if cache is not None else ModelCache()
  resolved = resolve_model_url(identifier_or_url)
  key      = resolved['key']

  cached = cache.get(key)
  if cached is not None and not force:
    return cached

  filepath = cache.path(key)
  print(f"  Downloading {key} ...")
  print(f"    From : {resolved['url']}")
  print(f"    To   : {filepath}")

  download_with_progress(resolved['url'], filepath, session)

  size_mb = filepath.stat().st_size / (1024 * 1024)
  print(f"  Downloaded {key} ({size_mb:.1f} MB)")

  return filepath


def main(
  argv : Optional[list] = None,
) -> None:
  parser = argparse.ArgumentParser(
    description = 'Download gravity field coefficient files from ICGEM',
  )
  parser.add_argument(
    'models',
    nargs   = '+',
    metavar = 'MODEL',
    help    = f"Model identifier ({', '.join(ICGEM_MODELS)}) or download URL.",
  )
  parser.add_argument(
    '--force',
    dest    = 'force',
    action  = 'store_true',
    default = False,
    help    = "Download even if the file is already cached.",
  )
  parser.add_argument(
    '--cache-dir',
    dest    = 'cache_dir',
    type    = str,
    default = None,
    help    = f"Cache directory (default: ${CACHE_ENV_VAR} or ~/.cache/gravity_models/icgem).",
  )
  args = parser.parse_args(argv)

  cache = ModelCache(args.cache_dir)

  print("Gravity Model Downloader")
  print("========================\n")

  for model in args.models:
    filepath = fetch_icgem_file(model, force=args.force, cache=cache)
    print(f"  {model} : {filepath}")


if __name__ == '__main__':
  main()
