"""Fixtures compartilhadas: um trecho real do qgames.log com duas partidas."""

import pytest

SAMPLE_LOG_LINES = [
    r"  0:00 ------------------------------------------------------------",
    r"  0:00 InitGame: \sv_floodProtect\1\sv_maxPing\0\sv_minPing\0\sv_maxRate\10000\sv_minRate\0\sv_hostname\Code Miner Server\g_gametype\0\sv_privateClients\2\sv_maxclients\16\sv_allowDownload\0\bot_minplayers\0\dmflags\0\fraglimit\20\timelimit\15\g_maxGameClients\0\capturelimit\8\version\ioq3 1.36 linux-x86_64 Apr 12 2009\protocol\68\mapname\q3dm17\gamename\baseq3\g_needpass\0",
    r" 20:38 ClientConnect: 2",
    r" 20:38 ClientUserinfoChanged: 2 n\Isgalamido\t\0\model\uriel/zael\hmodel\uriel/zael\g_redteam\\g_blueteam\\c1\5\c2\5\hc\100\w\0\l\0\tt\0\tl\0",
    r" 20:38 ClientBegin: 2",
    r" 20:40 Item: 2 weapon_rocketlauncher",
    r" 20:54 Kill: 1022 2 22: <world> killed Isgalamido by MOD_TRIGGER_HURT",
    r" 21:07 Kill: 1022 2 22: <world> killed Isgalamido by MOD_TRIGGER_HURT",
    r" 21:10 ClientDisconnect: 2",
    r" 21:15 ClientConnect: 2",
    r" 21:15 ClientUserinfoChanged: 2 n\Isgalamido\t\0\model\uriel/zael\hmodel\uriel/zael\g_redteam\\g_blueteam\\c1\5\c2\5\hc\100\w\0\l\0\tt\0\tl\0",
    r" 21:42 Kill: 1022 2 22: <world> killed Isgalamido by MOD_TRIGGER_HURT",
    r" 21:51 ClientConnect: 3",
    r" 21:51 ClientUserinfoChanged: 3 n\Dono da Bola\t\0\model\sarge/krusade\hmodel\sarge/krusade\g_redteam\\g_blueteam\\c1\5\c2\5\hc\95\w\0\l\0\tt\0\tl\0",
    r" 21:53 ClientUserinfoChanged: 3 n\Mocinha\t\0\model\sarge\hmodel\sarge\g_redteam\\g_blueteam\\c1\4\c2\5\hc\95\w\0\l\0\tt\0\tl\0",
    r" 22:06 Kill: 2 3 7: Isgalamido killed Mocinha by MOD_ROCKET_SPLASH",
    r" 22:11 Item: 2 item_quad",
    r" 22:18 Kill: 2 2 7: Isgalamido killed Isgalamido by MOD_ROCKET_SPLASH",
    r" 22:40 Kill: 2 2 7: Isgalamido killed Isgalamido by MOD_ROCKET_SPLASH",
    r" 23:06 Kill: 1022 2 22: <world> killed Isgalamido by MOD_TRIGGER_HURT",
    r" 25:05 Kill: 1022 2 22: <world> killed Isgalamido by MOD_TRIGGER_HURT",
    r" 25:18 Kill: 1022 2 22: <world> killed Isgalamido by MOD_TRIGGER_HURT",
    r" 25:41 Kill: 1022 2 19: <world> killed Isgalamido by MOD_FALLING",
    r" 25:52 Kill: 1022 2 22: <world> killed Isgalamido by MOD_TRIGGER_HURT",
    r" 26:09 Item: 2 weapon_rocketlauncher",
    r"  0:00 ------------------------------------------------------------",
    r"  0:00 InitGame: \sv_floodProtect\1\sv_maxPing\0\sv_minPing\0\sv_maxRate\10000\sv_minRate\0\sv_hostname\Code Miner Server\g_gametype\0\sv_privateClients\2\sv_maxclients\16\sv_allowDownload\0\dmflags\0\fraglimit\20\timelimit\15\g_maxGameClients\0\capturelimit\8\version\ioq3 1.36 linux-x86_64 Apr 12 2009\protocol\68\mapname\q3dm17\gamename\baseq3\g_needpass\0",
    r" 15:00 Exit: Timelimit hit.",
    r" 20:34 ClientConnect: 2",
    r" 20:34 ClientUserinfoChanged: 2 n\Isgalamido\t\0\model\xian/default\hmodel\xian/default\g_redteam\\g_blueteam\\c1\4\c2\5\hc\100\w\0\l\0\tt\0\tl\0",
    r" 20:37 ClientUserinfoChanged: 2 n\Isgalamido\t\0\model\uriel/zael\hmodel\uriel/zael\g_redteam\\g_blueteam\\c1\5\c2\5\hc\100\w\0\l\0\tt\0\tl\0",
    r" 20:37 ClientBegin: 2",
    r" 20:37 ShutdownGame:",
    r" 20:37 ------------------------------------------------------------",
]


@pytest.fixture
def sample_lines():
    return list(SAMPLE_LOG_LINES)


@pytest.fixture
def sample_log(tmp_path):
    path = tmp_path / "qgames.log"
    path.write_text("\n".join(SAMPLE_LOG_LINES) + "\n", encoding="utf-8")
    return path
