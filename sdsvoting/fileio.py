"""
Read and write data to files.

Two data formats are supported:
1. the Preflib format for ordinal preferences (soi, toi, soc, or toc), and
2. .sds.yaml files (a profile together with lotteries and their expected properties).
"""

import os
import ruamel.yaml
import preflibtools.instances as preflib

from sdsvoting.lotteries import make_lottery, InvalidLotteryException
from sdsvoting.preferences import Agenda, Profile, InvalidOrderException


#: Valid keys for .sds.yaml files.
SDS_YAML_VALID_KEYS = [
    "description",
    "agents",
    "alternatives",
    "profile",
    "lotteries",
]

#: Valid keys of a single lottery instance in .sds.yaml files.
SDS_YAML_VALID_LOTTERY_KEYS = [
    "lottery",
    "sd-efficient",
    "ex-post-efficient",
]

PREFLIB_EXTENSIONS = [".soi", ".toi", ".soc", ".toc"]


class MalformattedFileException(Exception):
    """Malformatted file (Preflib or .sds.yaml)."""


def get_file_names(dir_name, filename_extensions=None):
    """
    List all file names in a directory that fit the specified filename extensions.

    .. important::

        Not recursive, i.e., does not look into sub-directories!

    Parameters
    ----------
        dir_name : str
            Path of directory to be searched for files.

        filename_extensions : list of str, optional
            File names must have one of these extensions.

    Returns
    -------
        list of str
            List of file names contained in the directory.
    """
    files = []
    for _, _, filenames in os.walk(dir_name):
        files = filenames
        break  # do not consider sub-directories
    if len(files) == 0:
        raise FileNotFoundError(f"No files found in {dir_name}")
    if filename_extensions:
        files = [
            f for f in files if any(f.endswith(extension) for extension in filename_extensions)
        ]
    return sorted(files)


def read_preflib_file(filename):
    """
    Read a Preflib file with ordinal preferences (soi, toi, soc or toc).

    Every ballot of the Preflib file becomes a separate agent, i.e., a ballot with
    multiplicity `k` yields `k` agents with identical preferences. Agents are numbered
    `0, 1, 2, ...` and alternatives are named as in the Preflib file.

    Ties in a ballot become indifference classes. Alternatives that are not ranked in a
    ballot (soi and toi files) form an additional indifference class at the bottom.

    Parameters
    ----------
        filename : str
            Name of the Preflib file.

    Returns
    -------
        sdsvoting.preferences.Profile
            Preference profile extracted from Preflib file.
    """
    try:
        preflib_inst = preflib.get_parsed_instance(filename)
    except Exception as e:
        raise MalformattedFileException(
            "The preflib parser returned the following error: " + str(e)
        )

    if not isinstance(preflib_inst, preflib.OrdinalInstance):
        raise MalformattedFileException("Only ordinal preferences can be read from Preflib files.")

    alt_names = {}
    for alt, name in preflib_inst.alternatives_name.items():
        if name in alt_names.values():
            raise MalformattedFileException(
                f"{filename} contains the alternative name {name} more than once."
            )
        alt_names[alt] = name

    rankings = []
    for preferences, count in preflib_inst.multiplicity.items():
        ranked = {alt for indif_class in preferences for alt in indif_class}
        if not ranked <= set(alt_names):
            raise MalformattedFileException(f"{filename} refers to unnamed alternatives.")
        ranking = [[alt_names[alt] for alt in indif_class] for indif_class in preferences]
        unranked = [name for alt, name in alt_names.items() if alt not in ranked]
        if unranked:
            ranking.append(unranked)
        rankings.extend([ranking] * count)

    if not rankings:
        raise MalformattedFileException(f"{filename} does not contain any preferences.")

    agenda = Agenda(range(len(rankings)), list(alt_names.values()))
    try:
        return Profile(agenda, rankings)
    except InvalidOrderException as e:
        raise MalformattedFileException(f"{filename} contains invalid preferences: {e}")


def read_preflib_files_from_dir(dir_name):
    """
    Read all Preflib files (soi, toi, soc or toc) in a given directory.

    Parameters
    ----------
        dir_name : str
            Path of the directory to be searched for Preflib files.

    Returns
    -------
        dict
            Dictionary with file names as keys and profiles (class
            sdsvoting.preferences.Profile) as values.
    """
    files = get_file_names(dir_name, filename_extensions=PREFLIB_EXTENSIONS)

    profiles = {}
    for f in files:
        profiles[f] = read_preflib_file(os.path.join(dir_name, f))
    return profiles


def write_profile_to_preflib_file(filepath, profile):
    """
    Write a profile to a Preflib file (.soc for strict orders, .toc otherwise).

    Alternatives are written under their string representation. Agents with identical
    preferences are merged into a single ballot with the corresponding multiplicity.

    Parameters
    ----------
        filepath : str
            File path of the Preflib file.

        profile : sdsvoting.preferences.Profile
            Profile to be written.

    Returns
    -------
        None
    """
    preflib_inst = preflib.OrdinalInstance()
    preflib_inst.data_type = "soc" if profile.is_linear() else "toc"
    preflib_inst.file_name = os.path.basename(filepath)
    preflib_inst.num_alternatives = profile.num_alternatives
    alt_to_index = {}
    for index, alt in enumerate(profile.alternatives, start=1):
        alt_to_index[alt] = index
        preflib_inst.alternatives_name[index] = str(alt)

    for agent in profile:
        pref = tuple(
            tuple(sorted(alt_to_index[alt] for alt in indif_class))
            for indif_class in profile[agent].weak_ranking()
        )
        if pref not in preflib_inst.multiplicity:
            preflib_inst.orders.append(pref)
            preflib_inst.multiplicity[pref] = 1
        else:
            preflib_inst.multiplicity[pref] += 1
    preflib_inst.recompute_cardinality_param()
    preflib_inst.write(filepath)


def _yaml_flow_style_list(x):
    yamllist = ruamel.yaml.comments.CommentedSeq(x)
    yamllist.fa.set_flow_style()
    return yamllist


def _yaml_flow_style_dict(x):
    yamldict = ruamel.yaml.comments.CommentedMap(x)
    yamldict.fa.set_flow_style()
    return yamldict


def read_sds_yaml_file(filename):
    """
    Read contents of an sdsvoting yaml file (ending with .sds.yaml).

    Parameters
    ----------
        filename : str
            File name of the .sds.yaml file.

    Returns
    -------
        profile : sdsvoting.preferences.Profile
            A profile.

        lottery_instances : list of dict
            A list of lottery instances, which are dictionaries with key "lottery"
            (a `sdsvoting.lotteries.Lottery`) and optionally the expected results for
            "sd-efficient" and "ex-post-efficient".

        data : dict
            The YAML data from `filename`.
    """
    yaml = ruamel.yaml.YAML(typ="safe", pure=True)
    with open(filename) as inputfile:
        data = yaml.load(inputfile)
    if not isinstance(data, dict):
        raise MalformattedFileException(f"{filename} does not contain a dictionary.")
    for key in data.keys():
        if key not in SDS_YAML_VALID_KEYS:
            raise MalformattedFileException(f'Key "{key}" is not valid (undefined).')
    if "profile" not in data.keys():
        raise MalformattedFileException(f"{filename} does not contain a profile.")

    rankings = data["profile"]
    if "alternatives" in data.keys():
        alternatives = data["alternatives"]
    else:
        alternatives = []
        for ranking in rankings:
            for indif_class in ranking:
                for alt in indif_class if isinstance(indif_class, list) else [indif_class]:
                    if alt not in alternatives:
                        alternatives.append(alt)
    if "agents" in data.keys():
        agents = data["agents"]
    else:
        agents = range(len(rankings))

    try:
        profile = Profile(Agenda(agents, alternatives), rankings)
    except ValueError as e:
        raise MalformattedFileException(f"{filename} contains an invalid profile: {e}")

    lottery_instances = []
    for lottery_instance in data.get("lotteries") or []:
        if not isinstance(lottery_instance, dict) or "lottery" not in lottery_instance.keys():
            raise MalformattedFileException('Each lottery instance (dict) requires key "lottery".')
        for key in lottery_instance.keys():
            if key not in SDS_YAML_VALID_LOTTERY_KEYS:
                raise MalformattedFileException(f'Key "{key}" is not valid for lotteries.')
        instance = dict(lottery_instance)
        try:
            instance["lottery"] = make_lottery(profile.agenda, lottery_instance["lottery"])
        except InvalidLotteryException as e:
            raise MalformattedFileException(f"{filename} contains an invalid lottery: {e}")
        lottery_instances.append(instance)

    return profile, lottery_instances, data


def write_sds_instance_to_yaml_file(filename, profile, lottery_instances=None, description=None):
    """
    Write a profile (and lotteries) to an sdsvoting yaml file.

    Parameters
    ----------
        filename : str
            File name of the .sds.yaml file.

        profile : sdsvoting.preferences.Profile
            A profile.

        lottery_instances : list of dict, optional
            A list of lottery instances, which are dictionaries with key "lottery" and
            optionally "sd-efficient" and "ex-post-efficient".

        description : str, optional
            An optional description of the data.
    """
    data = {}
    if description is not None:
        data["description"] = description
    data["agents"] = _yaml_flow_style_list(list(profile.agents))
    data["alternatives"] = _yaml_flow_style_list(list(profile.alternatives))
    data["profile"] = [
        _yaml_flow_style_list(
            [sorted(indif_class, key=str) for indif_class in profile[agent].weak_ranking()]
        )
        for agent in profile
    ]
    if lottery_instances is not None:
        modified_lottery_instances = []
        for lottery_instance in lottery_instances:
            if "lottery" not in lottery_instance.keys():
                raise ValueError('Each lottery instance (dict) requires key "lottery".')
            lottery = make_lottery(profile.agenda, lottery_instance["lottery"])
            mod_lottery_instance = {
                "lottery": _yaml_flow_style_dict(
                    {
                        alt: str(prob)
                        for alt, prob in sorted(lottery.items(), key=lambda item: str(item[0]))
                    }
                )
            }
            for key in lottery_instance.keys():
                if key == "lottery":
                    continue
                if key not in SDS_YAML_VALID_LOTTERY_KEYS:
                    raise ValueError(f'Key "{key}" is not valid for lotteries.')
                mod_lottery_instance[key] = lottery_instance[key]
            modified_lottery_instances.append(mod_lottery_instance)
        data["lotteries"] = modified_lottery_instances

    yaml = ruamel.yaml.YAML()
    yaml.width = 120
    with open(filename, "w") as outfile:
        yaml.dump(data, outfile)
